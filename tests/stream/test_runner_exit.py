from __future__ import annotations

from pathlib import Path

import lob_sync.runner as runner_mod
from lob_sync.settings import SyncConfig
from lob_sync.synchronizer import SyncAborted


class _FakeStream:
    instances = []

    def __init__(self, config, channel):
        self.channel = channel
        self.started = False
        self.stopped = False
        _FakeStream.instances.append(self)

    def start(self):
        self.started = True

    def stop(self):
        self.stopped = True


def _fake_sync(exc):
    class _FakeSync:
        def __init__(self, config, channel):
            self.channel = channel

        def run(self):
            if exc is not None:
                raise exc
            return 0

    return _FakeSync


def test_abort_maps_to_exit_status_1(monkeypatch):
    monkeypatch.setattr(runner_mod, "WooXWSStream", _FakeStream)
    monkeypatch.setattr(runner_mod, "Synchronizer", _fake_sync(SyncAborted("gap")))

    assert runner_mod.run(SyncConfig(render=False)) == 1
    assert _FakeStream.instances[-1].started


def test_interrupt_closes_channel_and_stops_reader(monkeypatch):
    monkeypatch.setattr(runner_mod, "WooXWSStream", _FakeStream)
    monkeypatch.setattr(runner_mod, "Synchronizer", _fake_sync(KeyboardInterrupt()))

    assert runner_mod.run(SyncConfig(render=False)) == 130
    stream = _FakeStream.instances[-1]
    assert stream.stopped
    assert stream.channel.closed


def test_invalid_config_exits_2(tmp_path: Path):
    path = tmp_path / "bad.yaml"
    path.write_text("depth: 0\n")

    assert runner_mod.main(str(path)) == 2


def test_main_wires_logging_and_run(monkeypatch, tmp_path: Path):
    seen = {}

    def fake_setup_logging(level, component, subdir, console_to_stderr):
        seen["logging"] = (level, component, subdir, console_to_stderr)
        return tmp_path / "x.log"

    def fake_run(cfg):
        seen["cfg"] = cfg
        return 0

    monkeypatch.delenv("CONFIG_PATH", raising=False)
    monkeypatch.setattr(runner_mod, "setup_logging", fake_setup_logging)
    monkeypatch.setattr(runner_mod, "run", fake_run)

    assert runner_mod.main() == 0
    assert seen["logging"][1:] == ("sync", seen["cfg"].symbol, seen["cfg"].render)
