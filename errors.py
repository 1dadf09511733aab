'''Calculation errors.'''


#
# Copyright (c) 2025 LateGenXer
#
# SPDX-License-Identifier: AGPL-3.0-or-later
#


import datetime

from decimal import Decimal


__all__ = [
    'CalculationError',
    'UnknownSymbol',
    'RateUnavailable',
    'PriceUnavailable',
    'InsufficientShares',
    'MatchingExhausted',
    'OverConsumedLot',
    'InvalidRate',
]


class CalculationError(Exception):
    pass


class UnknownSymbol(CalculationError):

    def __init__(self, symbol:str):
        super().__init__(f'Unknown symbol: no transactions for {symbol}')
        self.symbol = symbol


class RateUnavailable(CalculationError):

    def __init__(self, currency:str, date:datetime.date):
        super().__init__(f'Rate unavailable: no {currency} exchange rate for {date}')
        self.currency = currency
        self.date = date


class PriceUnavailable(CalculationError):

    def __init__(self, symbol:str, date:datetime.date):
        super().__init__(f'Price unavailable: no {symbol} price for {date}')
        self.symbol = symbol
        self.date = date


class InsufficientShares(CalculationError):

    def __init__(self, held:Decimal, requested:Decimal):
        super().__init__(f'Insufficient shares: held {held}, requested {requested}')
        self.held = held
        self.requested = requested


# Internal consistency faults: unreachable when validation precedes matching

class MatchingExhausted(CalculationError):

    def __init__(self, date:datetime.date, unmatched:Decimal):
        super().__init__(f'Matching exhausted: {unmatched} shares disposed on {date} left unmatched')
        self.date = date
        self.unmatched = unmatched


class OverConsumedLot(CalculationError):

    def __init__(self, date:datetime.date, remaining:Decimal, requested:Decimal):
        super().__init__(f'Over-consumed lot: {requested} shares requested from lot acquired on {date} with {remaining} remaining')
        self.date = date
        self.remaining = remaining
        self.requested = requested


class InvalidRate(CalculationError):

    def __init__(self, rate:Decimal):
        super().__init__(f'Invalid rate: {rate} is not in (0, 1]')
        self.rate = rate
