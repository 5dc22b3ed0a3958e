"""Tests for runner configuration."""

from clockwork.interface import config as cfg


class TestConfig:

    def test_defaults_when_missing(self, tmp_path):
        assert cfg.load_config(tmp_path) == cfg.DEFAULT_CONFIG

    def test_defaults_are_copied(self, tmp_path):
        loaded = cfg.load_config(tmp_path)
        loaded["debug"] = True
        assert cfg.DEFAULT_CONFIG["debug"] is False

    def test_save_and_merge(self, tmp_path):
        """Saved keys override defaults; missing keys keep them."""
        assert cfg.save_config({"player_name": "Ada"}, tmp_path)
        loaded = cfg.load_config(tmp_path)
        assert loaded["player_name"] == "Ada"
        assert loaded["log_level"] == "WARNING"

    def test_corrupt_file(self, tmp_path):
        cfg.get_config_path(tmp_path).write_text("{oops")
        assert cfg.load_config(tmp_path) == cfg.DEFAULT_CONFIG

    def test_setters(self, tmp_path):
        cfg.set_log_level("debug", tmp_path)
        cfg.set_pretty(True, tmp_path)
        cfg.set_start_location("school", tmp_path)
        loaded = cfg.load_config(tmp_path)
        assert loaded["log_level"] == "DEBUG"
        assert loaded["pretty"] is True
        assert loaded["start_location"] == "school"

    def test_start_location_used_by_runner(self, tmp_path, bus):
        from io import StringIO

        from clockwork.interface.headless import HeadlessRunner
        from clockwork.state import MemoryWorldStore

        cfg.set_start_location("school", tmp_path)
        runner = HeadlessRunner(saves_dir=tmp_path, store=MemoryWorldStore(), output=StringIO())
        runner.handle_command({"cmd": "new"})
        assert runner.manager.current.current_location == "school"
        assert runner.manager.current.save_id == "autosave"
