'''
timeparse.py
(c) Will Roberts <wildwilhelm@gmail.com>  1 February, 2014

Reduced copy of github.com/wroberts/pytimeparse @ cc0550d, parsing
the duration strings understood by the Engine (Go's time.ParseDuration
units, largest unit first), e.g. '1h30m', '500ms', '1.5s'.
'''
# MIT LICENSE
#
# Permission is hereby granted, free of charge, to any person
# obtaining a copy of this software and associated documentation files
# (the "Software"), to deal in the Software without restriction,
# including without limitation the rights to use, copy, modify, merge,
# publish, distribute, sublicense, and/or sell copies of the Software,
# and to permit persons to whom the Software is furnished to do so,
# subject to the following conditions:
#
# The above copyright notice and this permission notice shall be
# included in all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND,
# EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF
# MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND
# NONINFRINGEMENT. IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT HOLDERS
# BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN
# ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN
# CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.
import re
from decimal import Decimal

FLOAT_NUMBER = r"(?:\d+\.?\d*|\.\d+)"

UNITS = (
    ('hours', 'h', 60 * 60),
    ('mins', 'm', 60),
    ('secs', 's', 1),
    ('milli', 'ms', Decimal(1) / 1000),
    ('micro', '(?:us|µs)', Decimal(1) / 1000 ** 2),
    ('nano', 'ns', Decimal(1) / 1000 ** 3),
)

TIMEFORMAT = ''.join(
    r'(?:(?P<{}>{}){})?'.format(name, FLOAT_NUMBER, suffix)
    for name, suffix, _ in UNITS
)

SECONDS_PER_UNIT = {name: factor for name, _, factor in UNITS}


def timeparse(sval):
    """Parse a time expression, returning it as a number of seconds, or
    `None` if no time expression can be parsed from the given string.
    """
    match = re.match(r'\s*' + TIMEFORMAT + r'\s*$', sval, re.I)
    if not match or not match.group(0).strip():
        return None
    seconds = sum(
        Decimal(value) * SECONDS_PER_UNIT[unit]
        for unit, value in match.groupdict().items() if value is not None
    )
    return float(seconds)
