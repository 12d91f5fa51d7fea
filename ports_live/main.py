from __future__ import annotations
import argparse
import logging

from .collectors import PortScanner
from .config import init_cfg_from_args
from .errors import BindError
from .manager import ServerManager
from .utils.net import local_network_addresses
from .utils.path import to_abs_path
from .web import create_app

def parse_args(argv=None):
    ap = argparse.ArgumentParser(description='List listening TCP ports and serve folders over HTTP')
    ap.add_argument('--port', type=int, default=8765, help='port of the local control panel')
    ap.add_argument('--serve', action='append', default=[], metavar='DIR', help='serve DIR at startup (repeatable)')
    ap.add_argument('--serve-port', type=int, default=None, help='port for the first --serve directory')
    ap.add_argument('--lan', action='store_true', help='expose --serve directories to the local network')
    ap.add_argument('--servers-file', type=str, default=None, help='JSON or YAML file holding saved servers')
    ap.add_argument('--no-persist', action='store_true', help='do not save or restore servers')
    ap.add_argument('--default-port', type=int, default=None, help='first port probed for new servers (default 8080)')
    ap.add_argument('--scan-ttl', type=float, default=None, help='seconds a port scan stays cached (default 2)')
    ap.add_argument('--max-connections', type=int, default=None, help='concurrent connections per server (default 50)')
    ap.add_argument('--list', action='store_true', help='print listening ports and exit')
    ap.add_argument('-v', '--verbose', action='store_true')
    return ap.parse_args(argv)

def print_ports(scanner: PortScanner) -> None:
    for p in scanner.force_scan():
        print(f"{p.port:5d} → {p.process_name} (pid {p.pid}) {p.address}")

def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    cfg = init_cfg_from_args(args)
    scanner = PortScanner(ttl=cfg.scan_ttl, command=cfg.scan_command)

    if args.list:
        print_ports(scanner)
        return

    manager = ServerManager(scanner, cfg)
    if cfg.persist_servers:
        restored = manager.restore_servers()
        lan = [s for s in restored if s.expose_to_lan]
        if lan:
            print(f"[warn] restored {len(lan)} LAN-accessible server(s): "
                  + ", ".join(f"{s.root_directory} on {s.port}" for s in lan))

    for i, d in enumerate(args.serve):
        directory = to_abs_path(d)
        port = args.serve_port if i == 0 and args.serve_port else manager.find_available_port(cfg.default_port)
        try:
            inst = manager.start_server(port, directory, args.lan)
        except (BindError, NotADirectoryError) as e:
            print(f"[warn] cannot serve {directory}: {e}")
            continue
        print(f"[*] Serving {inst.root_directory} at {inst.local_url}")
        lan_url = inst.lan_url(local_network_addresses())
        if lan_url:
            print(f"[*]   LAN: {lan_url}")

    app = create_app(cfg, scanner, manager)
    print(f"[*] Control panel on http://localhost:{args.port}")
    try:
        app.run(host='127.0.0.1', port=args.port, debug=False, use_reloader=False)
    finally:
        for inst in manager.snapshot_servers():
            inst.server.stop()

if __name__ == '__main__':
    main()
