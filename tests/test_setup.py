"""Tests for unitlog.setup module."""
import logging

import pytest

import unitlog
from unitlog import registry as registry_log
from unitlog._backend import InterceptHandler
from unitlog.levels import Level
from unitlog.setup import class_logger, configure_logging, log_exception
from unitlog.setup import set_level


class SetupTestCase:

    def setup_method(self):
        self.registry = configure_logging(level='INFO', sink='memory', performance=False)

    def teardown_method(self):
        registry_log.shutdown()


#
# configure_logging tests
#


class TestConfigureLogging(SetupTestCase):

    def test_installs_default_registry(self):
        """Test the configured registry becomes the default one."""
        assert registry_log.get_registry() is self.registry
        assert self.registry.default_level is Level.INFO
        assert unitlog.get_logger('x').sink_kind == 'memory'

    def test_reconfigure_closes_previous(self):
        """Test configuring again closes the logs of the previous registry."""
        log = unitlog.get_logger('old')
        registry = configure_logging(level='TRACE', sink='memory', performance=False)
        assert registry is not self.registry
        assert log.state is unitlog.LoggerState.EXITED
        assert unitlog.get_logger('old') is not log

    def test_performance(self):
        """Test performance mode can be switched on with a period."""
        registry = configure_logging(sink='memory', performance=True, period=60000)
        assert registry.performance_mode
        assert registry.dispatcher.period == 60000

    def test_master_level(self):
        """Test the master level acts as the global level."""
        registry = configure_logging(sink='memory', performance=False, master_level='ERROR')
        assert registry.get_or_create('x').level is Level.ERROR

    def test_stdlib_interception(self):
        """Test stdlib interception is installed on request."""
        handlers = logging.root.handlers[:]
        try:
            registry = configure_logging(sink='memory', performance=False, stdlib=True)
            handler = next(h for h in logging.root.handlers if isinstance(h, InterceptHandler))
            assert handler.registry is registry
        finally:
            logging.root.handlers = handlers


#
# set_level tests
#


class TestSetLevel(SetupTestCase):

    def test_set_level_moves_unpinned_logs(self):
        """Test set_level changes every log without a level of its own."""
        free = unitlog.get_logger('free')
        pinned = unitlog.get_logger('pinned', level='TRACE')
        set_level('warn')
        assert free.level is Level.WARN
        assert pinned.level is Level.TRACE
        assert self.registry.master.level is Level.WARN


#
# module-level function tests
#


class TestModuleFunctions(SetupTestCase):

    def test_module_functions_use_main_log(self):
        """Test the module-level calls write to the main log."""
        unitlog.info('started [] workers', 4)
        unitlog.debug('hidden')
        unitlog.warn('careful')
        sink = unitlog.get_logger(unitlog.MODULE_LOG).sinks[0]
        assert 'started [4] workers' in sink.lines[0]
        assert 'careful' in sink.lines[1]
        assert len(sink.lines) == 2


#
# class_logger tests
#


class TestClassLogger(SetupTestCase):

    def test_adds_named_log(self):
        """Test the class gets a log named after its module and name."""
        @class_logger
        class Worker:
            pass

        assert Worker.log.name == f'{__name__}.Worker'
        assert Worker.log is unitlog.get_logger(f'{__name__}.Worker')
        assert Worker()._should_log_info()
        assert not Worker()._should_log_trace()

    def test_level(self):
        """Test a level can be pinned for the class log."""
        class Chatty:
            pass

        class_logger(Chatty, level='TRACE')
        assert Chatty.log.pinned_level is Level.TRACE
        assert Chatty()._should_log_trace()


#
# log_exception tests
#


class TestLogException(SetupTestCase):

    def test_logs_and_reraises(self):
        """Test the decorator logs the exception and re-raises it."""
        log = unitlog.get_logger('guarded')

        @log_exception(log)
        def fail():
            raise RuntimeError('bad thing')

        with pytest.raises(RuntimeError):
            fail()
        text = log.sinks[0].text
        assert 'bad thing' in text
        assert 'RuntimeError' in text

    def test_passes_return_value(self):
        """Test the decorated function's result is returned."""
        @log_exception(unitlog.get_logger('guarded'))
        def ok(x):
            return x * 2

        assert ok(21) == 42

    def test_works_with_stdlib_logger(self, caplog):
        """Test a stdlib logger can be used as well."""
        @log_exception(logging.getLogger('stdlib-guarded'))
        def fail():
            raise ValueError('stdlib')

        with caplog.at_level(logging.ERROR), pytest.raises(ValueError):
            fail()
        assert 'stdlib' in caplog.text


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
