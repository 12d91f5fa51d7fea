from __future__ import annotations
from flask import Flask, Response, current_app, request
import orjson

from ..config import CFG
from ..errors import BindError
from ..manager import ServerManager
from ..collectors.scanner import PortScanner
from ..utils.net import local_network_addresses
from .ui import render_html

def dumps(obj) -> str:
    return orjson.dumps(obj).decode()

def json_response(obj, status: int = 200) -> Response:
    return Response(dumps(obj), status=status, mimetype="application/json")

def _as_bool(v) -> bool:
    if isinstance(v, str):
        return v.lower() in ("1", "true", "yes", "on")
    return bool(v)

def create_app(cfg: CFG, scanner: PortScanner, manager: ServerManager) -> Flask:
    app = Flask(__name__)

    @app.get("/")
    def index():
        return Response(render_html(cfg.default_port, cfg.share_on_lan_by_default), mimetype="text/html")

    @app.get("/api/ports")
    def api_ports():
        force = _as_bool(request.args.get("force", ""))
        ports = scanner.force_scan() if force else scanner.scan()
        return json_response([p.to_dict() for p in ports])

    @app.get("/api/servers")
    def api_servers():
        addresses = local_network_addresses()
        return json_response([s.to_dict(addresses) for s in manager.snapshot_servers()])

    @app.post("/api/servers")
    def api_start_server():
        body = request.get_json(silent=True) or {}
        directory = body.get("directory")
        if not directory:
            return json_response({"error": "missing 'directory'"}, 400)
        port = body.get("port")
        if port in (None, ""):
            port = manager.find_available_port(cfg.default_port)
        try:
            port = int(port)
        except (TypeError, ValueError):
            return json_response({"error": f"invalid port {port!r}"}, 400)
        lan = _as_bool(body.get("exposeToLAN", cfg.share_on_lan_by_default))
        if manager.is_port_in_use(port):
            return json_response({"error": f"port {port} is already in use"}, 409)
        try:
            inst = manager.start_server(port, directory, lan)
        except NotADirectoryError:
            return json_response({"error": f"not a directory: {directory}"}, 400)
        except BindError as e:
            current_app.logger.warning("start failed: %s", e)
            return json_response({"error": str(e)}, 409)
        current_app.logger.info("started server %d on port %d for %s", inst.id, inst.port, directory)
        return json_response(inst.to_dict(local_network_addresses()), 201)

    @app.delete("/api/servers/<int:instance_id>")
    def api_stop_server(instance_id: int):
        inst = manager.get(instance_id)
        if inst is None:
            return json_response({"error": f"no server {instance_id}"}, 404)
        manager.stop_server(inst)
        current_app.logger.info("stopped server %d on port %d", inst.id, inst.port)
        return json_response({"ok": True})

    @app.post("/api/servers/stop_all")
    def api_stop_all():
        count = len(manager.snapshot_servers())
        manager.stop_all_servers()
        return json_response({"ok": True, "stopped": count})

    return app
