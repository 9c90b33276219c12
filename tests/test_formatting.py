"""Tests for unitlog.formatting module."""
import datetime

import pytest

from unitlog.formatting import RECORD_SEPARATOR, FormatFlag, Layout, compose
from unitlog.levels import Level


class Unprintable:

    def __str__(self):
        raise RuntimeError('no')


#
# compose tests
#


class TestCompose:

    def test_placeholder_substitution(self):
        """Test the marker is replaced by the decorated argument."""
        assert compose('i am [] here', ['standing']) == 'i am [standing] here'

    def test_extra_arguments_appended(self):
        """Test arguments without a marker are appended in order."""
        assert compose('[]', ['a', 'b']) == '[a][b]'
        assert compose('x', [1, 2]) == 'x[1][2]'

    def test_surplus_markers_stay_literal(self):
        """Test markers without an argument are left as text."""
        assert compose('[] and []', ['x']) == '[x] and []'

    def test_no_arguments_returns_template(self):
        """Test a template without arguments is returned as is."""
        assert compose('[] untouched') == '[] untouched'

    def test_arguments_are_stringified(self):
        """Test non-string arguments use their str form."""
        assert compose('got [] and []', [None, 3.5]) == 'got [None] and [3.5]'

    def test_unprintable_argument(self):
        """Test a failing str() does not break composition."""
        assert compose('value []', [Unprintable()]) == 'value [<unprintable Unprintable>]'

    def test_template_is_stringified(self):
        """Test a non-string template is converted."""
        assert compose(42, ['x']) == '42[x]'


#
# Layout tests
#


class TestLayout:

    def setup_method(self):
        self.layout = Layout()

    def test_plain_line(self):
        """Test the line with no flags is glyph and message."""
        line = self.layout.format_line('A', Level.WARN, 'careful', FormatFlag.NONE)
        assert line == '* careful\n'

    def test_name_is_padded_to_widest(self):
        """Test names line up with the widest name seen so far."""
        self.layout.format_line('long-name', Level.INFO, 'x')
        line = self.layout.format_line('a', Level.INFO, 'y')
        assert line == f'> [ {"a".ljust(9)} ] y\n'
        assert self.layout.name_width == len('long-name')

    def test_timestamp(self):
        """Test the epoch millisecond timestamp comes first."""
        line = self.layout.format_line('A', Level.INFO, 'm', FormatFlag.TIMESTAMP, created=1.5)
        assert line == '1500 > m\n'

    def test_detailed_time(self):
        """Test the detailed time has four fractional digits."""
        created = datetime.datetime(2024, 1, 2, 3, 4, 5, 678950).timestamp()
        line = self.layout.format_line('A', Level.INFO, 'm', FormatFlag.DETAILED_TIME, created=created)
        assert line == '> [03:04:05.6789]m\n'

    def test_field_order(self):
        """Test fields appear in fixed order when all flags are set."""
        flags = FormatFlag.TIMESTAMP | FormatFlag.NAME | FormatFlag.DETAILED_TIME
        created = datetime.datetime(2024, 1, 2, 3, 4, 5).timestamp()
        line = self.layout.format_line('A', Level.ERROR, 'm', flags, created=created)
        assert line == f'{int(created * 1000)} # [ A ] [03:04:05.0000]m\n'

    def test_record_separator(self):
        """Test REPLACE_ENDLINES terminates with the record separator."""
        line = self.layout.format_line('A', Level.INFO, 'm', FormatFlag.REPLACE_ENDLINES)
        assert line == f'> m{RECORD_SEPARATOR}'

    def test_highlight_indents_others(self):
        """Test lines of non-highlighted names are indented."""
        self.layout.set_highlighted('A')
        assert self.layout.format_line('A', Level.INFO, 'm', FormatFlag.NONE) == '> m\n'
        assert self.layout.format_line('B', Level.INFO, 'm', FormatFlag.NONE) == '\t\t> m\n'

    def test_unhighlight_restores(self):
        """Test indentation stops once nothing is highlighted."""
        self.layout.set_highlighted('A')
        self.layout.set_highlighted('A', False)
        assert self.layout.highlighted == frozenset()
        assert not self.layout.is_dimmed('B')


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
