#
# Copyright (c) 2025 LateGenXer
#
# SPDX-License-Identifier: AGPL-3.0-or-later
#

#
# Whitespace separated trade files, one trade per line:
#
#   BUY  01/01/2021 GOOG 100 50.00
#   SELL 01/06/2021 GOOG  50 80.00 USD
#
# Fields are kind, date (DD/MM/YYYY), symbol, shares, unit price, and an
# optional currency.  Lines starting with '#' are comments.
#


import datetime
import logging
import typing

from decimal import Decimal, InvalidOperation

from ledger import Kind, Transaction


__all__ = [
    'parse',
]


logger = logging.getLogger('trades')


def parse(stream:typing.Iterable[str], currency:str='USD') -> list[Transaction]:
    transactions = []

    line_no = 0
    for line in stream:
        line_no += 1
        line = line.rstrip('\n')
        if line.startswith('#'):
            continue
        row = line.split()
        if not row:
            continue

        if len(row) not in (5, 6):
            raise ValueError(f'line {line_no}: expected 5 or 6 fields, got {len(row)}')

        trade, date, symbol, shares, price = row[:5]

        # Case-insensitive
        trade = trade.upper()

        if trade in ('B', 'BUY'):
            kind = Kind.ACQUISITION
        elif trade in ('S', 'SELL'):
            kind = Kind.DISPOSAL
        else:
            raise NotImplementedError(f'line {line_no}: {trade} trades not supported')

        try:
            date = datetime.datetime.strptime(date, "%d/%m/%Y").date()
            quantity = Decimal(shares)
            unit_price = Decimal(price)
        except (ValueError, InvalidOperation) as ex:
            raise ValueError(f'line {line_no}: {line}') from ex

        transactions.append(Transaction(
            symbol=symbol,
            kind=kind,
            date=date,
            quantity=quantity,
            unit_price=unit_price,
            currency=row[5].upper() if len(row) == 6 else currency,
        ))

    logger.info(f'Parsed {len(transactions)} trades')

    return transactions
