from ports_live.collectors.scanner import PortScanner

CAPTURE = "p100\nclistener\nn127.0.0.1:8080\np200\ncother\nn[::1]:9090\n"


class Clock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def counting_runner(result=(0, CAPTURE, "")):
    calls = []

    def run(command):
        calls.append(list(command))
        return result

    return run, calls


def test_scan_within_ttl_uses_cache():
    clock = Clock()
    run, calls = counting_runner()
    scanner = PortScanner(ttl=2.0, runner=run, clock=clock)
    first = scanner.scan()
    clock.now += 1.5
    second = scanner.scan()
    assert first == second
    assert len(first) == 2
    assert len(calls) == 1


def test_scan_after_ttl_recaptures():
    clock = Clock()
    run, calls = counting_runner()
    scanner = PortScanner(ttl=2.0, runner=run, clock=clock)
    scanner.scan()
    clock.now += 2.0
    scanner.scan()
    assert len(calls) == 2


def test_force_scan_always_runs_and_refreshes_cache():
    clock = Clock()
    run, calls = counting_runner()
    scanner = PortScanner(ttl=2.0, runner=run, clock=clock)
    scanner.scan()
    scanner.force_scan()
    scanner.force_scan()
    assert len(calls) == 3
    scanner.scan()
    assert len(calls) == 3


def test_command_is_restricted_to_tcp_listen():
    run, calls = counting_runner()
    PortScanner(runner=run).scan()
    cmd = calls[0]
    assert cmd[0] == "lsof"
    for flag in ("-iTCP", "-sTCP:LISTEN", "-n", "-P"):
        assert flag in cmd


def test_spawn_failure_returns_empty(caplog):
    def boom(command):
        raise FileNotFoundError("lsof")

    assert PortScanner(runner=boom).scan() == []
    assert "failed to run" in caplog.text


def test_nonzero_exit_without_output_returns_empty(caplog):
    run, _ = counting_runner((1, "", "permission denied"))
    assert PortScanner(runner=run).scan() == []
    assert "permission denied" in caplog.text


def test_nonzero_exit_with_output_still_parses(caplog):
    run, _ = counting_runner((1, CAPTURE, "some sockets hidden"))
    assert [p.port for p in PortScanner(runner=run).scan()] == [8080, 9090]
    assert any(r.levelname == "WARNING" for r in caplog.records)


def test_returned_list_is_a_copy():
    run, _ = counting_runner()
    scanner = PortScanner(runner=run)
    scanner.scan().clear()
    assert len(scanner.scan()) == 2
