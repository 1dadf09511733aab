'''Historic stock prices.'''


#
# Copyright (c) 2025 LateGenXer
#
# SPDX-License-Identifier: AGPL-3.0-or-later
#


import csv
import datetime
import logging
import typing

from decimal import Decimal, InvalidOperation

from errors import PriceUnavailable


__all__ = [
    'HistoricPrices',
]


logger = logging.getLogger('prices')


class HistoricPrices:
    '''Daily close prices of one symbol, from a Yahoo Finance history CSV.'''

    def __init__(self, symbol:str, stream:typing.TextIO):
        self.symbol = symbol
        self.prices: dict[datetime.date, Decimal] = {}
        for row in csv.DictReader(stream):
            date = datetime.date.fromisoformat(row['Date'])
            try:
                price = Decimal(row['Close'])
            except InvalidOperation:
                continue
            self.prices[date] = price
        logger.debug(f'Loaded {len(self.prices)} {symbol} prices')

    def price_for(self, symbol:str, date:datetime.date) -> Decimal:
        if symbol != self.symbol:
            raise ValueError(f'prices are for {self.symbol}, not {symbol}')
        try:
            return self.prices[date]
        except KeyError:
            raise PriceUnavailable(symbol, date) from None
