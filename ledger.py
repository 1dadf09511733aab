'''Per-symbol transaction ledger.'''


#
# Copyright (c) 2025 LateGenXer
#
# SPDX-License-Identifier: AGPL-3.0-or-later
#


import dataclasses
import datetime
import operator

from enum import Enum
from decimal import Decimal
from typing import Iterable

from errors import UnknownSymbol


__all__ = [
    'Kind',
    'Transaction',
    'Ledger',
]


Kind = Enum('Kind', ['ACQUISITION', 'DISPOSAL'])


@dataclasses.dataclass(frozen=True)
class Transaction:
    symbol: str
    kind: Kind
    date: datetime.date
    quantity: Decimal
    unit_price: Decimal
    currency: str

    def __post_init__(self) -> None:
        if not self.quantity > Decimal(0):
            raise ValueError(f'{self.kind.name} {self.date} {self.symbol}: quantity must be positive, got {self.quantity}')


class Ledger:

    def __init__(self, symbol:str, transactions:Iterable[Transaction]):
        transactions = list(transactions)
        if not transactions:
            raise UnknownSymbol(symbol)
        for tr in transactions:
            if tr.symbol != symbol:
                raise UnknownSymbol(symbol)
        self.symbol = symbol

        # Stable, so same-day transactions keep ingestion order
        self.transactions = sorted(transactions, key=operator.attrgetter('date'))

    @classmethod
    def for_symbol(cls, symbol:str, transactions:Iterable[Transaction]) -> 'Ledger':
        return cls(symbol, [tr for tr in transactions if tr.symbol == symbol])

    def acquisitions(self) -> list[Transaction]:
        return [tr for tr in self.transactions if tr.kind == Kind.ACQUISITION]

    def acquisitions_before(self, date:datetime.date) -> list[Transaction]:
        return [tr for tr in self.acquisitions() if tr.date <= date]

    def acquisitions_within(self, date:datetime.date, window_days_after:int=30) -> list[Transaction]:
        end_date = date + datetime.timedelta(days=window_days_after)
        return [tr for tr in self.acquisitions() if date < tr.date <= end_date]

    def disposals_before(self, date:datetime.date) -> list[Transaction]:
        return [tr for tr in self.transactions if tr.kind == Kind.DISPOSAL and tr.date < date]

    def total_held_before(self, date:datetime.date) -> Decimal:
        acquired = sum((tr.quantity for tr in self.acquisitions_before(date)), Decimal(0))
        disposed = sum((tr.quantity for tr in self.disposals_before(date)), Decimal(0))
        return acquired - disposed
