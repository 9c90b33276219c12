"""Tests for unitlog.adapters module."""
import pytest

from unitlog.adapters import DumbLogger, LogView, get_dumb_logger
from unitlog.formatting import FormatFlag
from unitlog.levels import Level
from unitlog.registry import Registry
from unitlog.sinks import MemorySink


class TestLogView:

    def setup_method(self):
        self.registry = Registry(default_level='INFO', sink='memory')
        self.sink = MemorySink(flags=FormatFlag.NONE)
        self.log = self.registry.get_or_create('viewed').attach_sink(self.sink)
        self.view = LogView(self.log)

    def teardown_method(self):
        self.registry.close_all(timeout=2)

    def test_delegates_logging(self):
        """Test logging calls reach the underlying log."""
        self.view.li('from view []', 1)
        self.view.le('error')
        assert self.sink.lines == ['> from view [1]', '# error']

    def test_follows_level(self):
        """Test the view filters with the log's current level."""
        self.log.set_level('ERROR')
        self.view.info('hidden')
        assert self.sink.lines == []
        assert self.view.level is Level.ERROR

    def test_no_configuration_access(self):
        """Test the view exposes no configuration or exit calls."""
        for attr in ('set_level', 'attach_sink', 'detach_sink', 'exit', 'set_highlighted'):
            assert not hasattr(self.view, attr)
        assert self.view.name == 'viewed'

    def test_lr_through_view(self):
        """Test value-returning calls work through the view."""
        self.log.set_level('TRACE')
        assert self.view.lr(5, 'result') == 5
        assert self.sink.lines == ['. [5]: result']


class TestDumbLogger:

    def test_prints_with_preamble(self, capsys):
        """Test messages are printed behind the preamble."""
        DumbLogger().li('value []', 3)
        assert capsys.readouterr().out == '# value [3]\n'

    def test_prints_every_level(self, capsys):
        """Test no level is filtered out."""
        logger = DumbLogger('>>')
        logger.trace('t')
        logger.error('e')
        assert capsys.readouterr().out == '>> t\n>> e\n'

    def test_ler_returns_value(self, capsys):
        """Test the convenience calls are available."""
        assert DumbLogger().ler(False, 'nope') is False
        assert capsys.readouterr().out == '# nope\n'

    def test_shared_instance(self):
        """Test the shared instance is created once."""
        assert get_dumb_logger() is get_dumb_logger()


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
