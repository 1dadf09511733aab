#
# Copyright (c) 2025 LateGenXer
#
# SPDX-License-Identifier: AGPL-3.0-or-later
#


import html
import sys
import textwrap

from decimal import Decimal, ROUND_HALF_UP
from typing import Sequence, Any, TextIO
from abc import ABC, abstractmethod


__all__ = [
    'money',
    'currency_symbol',
    'Report',
    'TextReport',
    'HtmlReport',
]


currency_symbols = {
    'GBP': '£',
    'EUR': '€',
    'USD': '$',
    'JPY': '¥',
}


def currency_symbol(currency:str) -> str:
    try:
        return currency_symbols[currency]
    except KeyError:
        return currency + ' '


def money(amount:Decimal, symbol:str='£') -> str:
    amount = amount.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
    if amount < 0:
        return f'-{symbol}{-amount:,}'
    return f'{symbol}{amount:,}'


class Report(ABC):

    def start(self, title:str) -> None:
        pass

    @abstractmethod
    def write_heading(self, heading:str, level:int=1) -> None:  # pragma: no cover
        raise NotImplementedError

    @abstractmethod
    def write_paragraph(self, paragraph:str) -> None:  # pragma: no cover
        raise NotImplementedError

    @abstractmethod
    def write_list(self, items:Sequence[str]) -> None:  # pragma: no cover
        raise NotImplementedError

    @abstractmethod
    def write_table(self, rows:list[list], header:Sequence[Any]|None=None, just:str|None=None, indent:str='') -> None:  # pragma: no cover
        raise NotImplementedError

    @staticmethod
    def format(field:Any) -> str:
        if field is None or field != field:
            return ''
        else:
            return str(field)

    def end(self) -> None:
        pass


class TextReport(Report):

    def __init__(self, stream:TextIO=sys.stdout):
        self.stream = stream
        self.heading_sep = ''

    def write_heading(self, heading:str, level:int=1) -> None:
        if level <= 1:
            rule = '=' * len(heading)
            heading = '\n'.join([rule, heading, rule])
        if self.stream.isatty():
            # Ansi escape
            _csi = '\33['
            heading = _csi + '1m' + heading + _csi + '0m'
        self.stream.write(self.heading_sep + heading + '\n\n')
        self.heading_sep = ''

    def write_paragraph(self, paragraph:str) -> None:
        paragraph = '\n'.join(textwrap.wrap(paragraph, width=120))
        self.stream.write(paragraph + '\n\n')
        self.heading_sep = '\n'

    def write_list(self, items:Sequence[str]) -> None:
        for item in items:
            self.stream.write(f'* {item}\n')
        self.stream.write('\n')
        self.heading_sep = '\n'

    def write_table(self, rows:list[list], header:Sequence[Any]|None=None, just:str|None=None, indent:str='') -> None:
        table = [[self.format(field) for field in row] for row in rows]
        if header is not None:
            table.insert(0, [self.format(field) for field in header])
        if not table:
            return
        ncols = len(table[0])
        if just is None:
            just = 'l' * ncols
        assert len(just) == ncols

        widths = [max(len(row[c]) for row in table) for c in range(ncols)]
        m = {
            'c': str.center,
            'l': str.ljust,
            'r': str.rjust,
        }

        sep = '  '
        lines = []
        for row in table:
            cells = [m[j](cell, width) for cell, j, width in zip(row, just, widths)]
            lines.append(indent + sep.join(cells).rstrip())
        if header is not None:
            lines.insert(1, indent + '─' * len(sep.join([' ' * width for width in widths])))

        self.stream.write('\n'.join(lines) + '\n\n')
        self.heading_sep = '\n'


class HtmlReport(Report):

    _css = '''
body {
  font-family: monospace;
  font-size: 0.75rem;
  background-color: white;
}

h1, h2, h3 {
  font-size: 100%;
  font-weight: bold;
  margin-top: 2em;
  margin-bottom: 1em;
}

h1 {
  text-transform: uppercase;
}

.text-center { text-align: center; }
.text-right { text-align: right; }
.text-left { text-align: left; }

table {
  margin: 1em 0 1em 2ch;
  border-spacing: 0;
}

thead tr th {
  border-bottom: 1.5px solid;
}

th, td {
  padding: 0.25em 1ch 0.25em 1ch;
}
'''

    def __init__(self, stream:TextIO):
        self.stream = stream

    def start(self, title:str) -> None:
        title = html.escape(title)
        self.stream.write(f'''<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{title}</title>
<style>{self._css}</style>
</head>
<body>
''')

    def write_heading(self, heading:str, level:int=1) -> None:
        heading = html.escape(heading)
        self.stream.write(f'\n<h{level}>{heading}</h{level}>\n\n')

    def write_paragraph(self, paragraph:str) -> None:
        paragraph = html.escape(paragraph)
        self.stream.write(f'<p>{paragraph}</p>\n\n')

    def write_list(self, items:Sequence[str]) -> None:
        self.stream.write('<ul>\n')
        for item in items:
            self.stream.write(f'<li>{html.escape(item)}</li>\n')
        self.stream.write('</ul>\n\n')

    @staticmethod
    def format_and_escape(field:Any) -> str:
        field = Report.format(field)
        field = html.escape(field)
        return field

    def write_table(self, rows:list[list], header:Sequence[Any]|None=None, just:str|None=None, indent:str='') -> None:
        fmt = self.format_and_escape

        m = {
            'c': 'text-center',
            'l': 'text-left',
            'r': 'text-right',
        }
        if just is None:
            classes = ['text-left'] * len(rows[0] if rows else header or [])
        else:
            classes = [m[j] for j in just]

        self.stream.write('<table>\n')
        if header:
            self.stream.write('<thead><tr>' + ''.join([f'<th class="{j}">{fmt(field)}</th>' for field, j in zip(header, classes)]) + '</tr></thead>\n')
        self.stream.write('<tbody>\n')
        for row in rows:
            self.stream.write('<tr>' + ''.join([f'<td class="{j}">{fmt(field)}</td>' for field, j in zip(row, classes)]) + '</tr>\n')
        self.stream.write('</tbody>\n')
        self.stream.write('</table>\n')

    def end(self) -> None:
        self.stream.write('\n')
        self.stream.write('</body>\n')
        self.stream.write('</html>\n')
