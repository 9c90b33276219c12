import os

from libb import Setting, expandabspath, get_tempdir

Setting.unlock()

# Tmpdir
tmpdir = get_tempdir()

# Logging core
unitlog = Setting()
unitlog.level = os.getenv('CONFIG_UNITLOG_LEVEL', 'INFO').upper()
unitlog.sink = os.getenv('CONFIG_UNITLOG_SINK', 'console').lower()

# Master log (silent unless a level is given)
unitlog.master.name = os.getenv('CONFIG_UNITLOG_MASTER_NAME', 'M-log')
unitlog.master.level = os.getenv('CONFIG_UNITLOG_MASTER_LEVEL') or None

# Performance mode
unitlog.performance.enabled = os.getenv('CONFIG_UNITLOG_PERFORMANCE', '').lower() in {'1', 'true', 'yes'}
unitlog.performance.period = int(os.getenv('CONFIG_UNITLOG_PERFORMANCE_PERIOD', 0)) or 1000
unitlog.performance.join_timeout = float(os.getenv('CONFIG_UNITLOG_JOIN_TIMEOUT', 0)) or 5.0

# File sinks
unitlog.file.dir = None
if os.getenv('CONFIG_UNITLOG_FILE_DIR'):
    unitlog.file.dir = expandabspath(os.getenv('CONFIG_UNITLOG_FILE_DIR'))

Setting.lock()
