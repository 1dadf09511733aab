'''Charles Schwab Equity Award Center export parsing.

The EquityAwardsCenter_EquityDetails_*.csv file can be downloaded from
https://client.schwab.com/app/accounts/equityawards/#/equityTodayView > Export.
Each vested lot still available to sell becomes an acquisition.
'''


#
# Copyright (c) 2025 LateGenXer
#
# SPDX-License-Identifier: AGPL-3.0-or-later
#


import csv
import datetime
import logging
import typing

from decimal import Decimal

from ledger import Kind, Transaction


__all__ = [
    'parse_equity_details',
]


logger = logging.getLogger('schwab')


_section_start = '*** EQUITY AWARD SHARES ***'
_section_end = 'Totals'

_header = [
    'Award Date',
    'Symbol',
    'Award ID',
    'Share Type',
    'Market Value',
    'Date Holding Period Met',
    'Deposit Date',
    'Date Acquired',
    'Acquisition Price',
    'Shares',
    'Available to Sell',
]


def _parse_date(s:str) -> datetime.date|None:
    try:
        return datetime.datetime.strptime(s, '%m-%d-%Y').date()
    except ValueError:
        return None


def _parse_number(s:str) -> Decimal:
    return Decimal(s.replace('$', '').replace(',', ''))


def parse_equity_details(stream:typing.TextIO) -> list[Transaction]:
    transactions = []

    in_section = False
    for row in csv.reader(stream):
        if not row:
            continue
        if row[0] == _section_start:
            in_section = True
            continue
        if not in_section:
            continue
        if row[0] == _section_end:
            in_section = False
            continue

        if row[0] == _header[0]:
            if row[:len(_header)] != _header:
                raise ValueError(f'unexpected equity award columns: {row}')
            continue

        if _parse_date(row[0]) is None:
            continue

        symbol = row[1]
        date_acquired = _parse_date(row[7])
        if date_acquired is None:
            raise ValueError(f'invalid acquisition date {row[7]!r}')
        acquisition_price = _parse_number(row[8])
        available_to_sell = _parse_number(row[10])

        if not available_to_sell:
            logger.debug(f'{symbol} {date_acquired}: nothing available to sell')
            continue

        transactions.append(Transaction(
            symbol=symbol,
            kind=Kind.ACQUISITION,
            date=date_acquired,
            quantity=available_to_sell,
            unit_price=acquisition_price,
            currency='USD',
        ))

    logger.info(f'Parsed {len(transactions)} equity awards')

    return transactions
