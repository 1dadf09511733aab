'''Share identification: Bed & Breakfast rule, then the Section 104 holding.

Disposals are identified against acquisitions following
https://www.gov.uk/hmrc-internal-manuals/capital-gains-manual/cg51560 in this
order:

1. acquisitions within 30 days after the disposal, earliest first;
2. the Section 104 holding, at its average cost at the time of disposal.

Same-day acquisitions are not matched specially; they are part of the
Section 104 holding by the time a disposal on the same day is processed.
'''


#
# Copyright (c) 2025 LateGenXer
#
# SPDX-License-Identifier: AGPL-3.0-or-later
#


import dataclasses
import datetime
import logging
import operator

from enum import Enum
from decimal import Decimal

from currency import Normalizer
from errors import InsufficientShares, MatchingExhausted, OverConsumedLot
from ledger import Ledger, Transaction


__all__ = [
    'Rule',
    'Lot',
    'Section104Pool',
    'MatchedLot',
    'PoolUpdate',
    'Matcher',
    'validate',
]


logger = logging.getLogger('matching')


Rule = Enum('Rule', ['BED_AND_BREAKFAST', 'SECTION_104'])


bed_and_breakfast_days = 30


@dataclasses.dataclass
class Lot:
    transaction: Transaction

    # How many shares are yet to be identified
    remaining: Decimal

    # In home currency, converted on first use when not given
    unit_cost: Decimal|None = None

    normalizer: Normalizer|None = dataclasses.field(default=None, repr=False, compare=False)

    @property
    def date(self) -> datetime.date:
        return self.transaction.date

    def consume(self, quantity:Decimal) -> Decimal:
        '''Take quantity shares off the lot, returning their cost.'''
        assert quantity > Decimal(0)
        if quantity > self.remaining:
            raise OverConsumedLot(self.date, self.remaining, quantity)
        if self.unit_cost is None:
            assert self.normalizer is not None
            tr = self.transaction
            self.unit_cost = self.normalizer.convert(tr.unit_price, tr.currency, tr.date)
        self.remaining -= quantity
        return quantity * self.unit_cost


@dataclasses.dataclass
class Section104Pool:
    quantity: Decimal = Decimal(0)
    cost: Decimal = Decimal(0)

    def average_cost(self) -> Decimal:
        assert self.quantity > Decimal(0)
        return self.cost / self.quantity

    def add(self, quantity:Decimal, cost:Decimal) -> None:
        self.quantity += quantity
        self.cost += cost

    def remove(self, quantity:Decimal) -> Decimal:
        assert Decimal(0) < quantity <= self.quantity
        if quantity == self.quantity:
            cost = self.cost
        else:
            cost = quantity * self.average_cost()
        self.quantity -= quantity
        self.cost -= cost
        return cost


@dataclasses.dataclass
class MatchedLot:
    quantity: Decimal
    cost: Decimal
    proceeds: Decimal
    rule: Rule
    acquisition_date: datetime.date|None = None


@dataclasses.dataclass
class PoolUpdate:
    date: datetime.date
    description: str
    quantity: Decimal
    delta_cost: Decimal
    pool_quantity: Decimal
    pool_cost: Decimal


@dataclasses.dataclass
class _Disposal:
    date: datetime.date
    shares: Decimal
    unidentified: Decimal
    unit_proceeds: Decimal = Decimal(0)
    matches: list[MatchedLot] = dataclasses.field(default_factory=list)

    def identify(self, quantity:Decimal, cost:Decimal, rule:Rule, acquisition_date:datetime.date|None=None) -> None:
        assert Decimal(0) < quantity <= self.unidentified
        self.unidentified -= quantity
        self.matches.append(MatchedLot(
            quantity=quantity,
            cost=cost,
            proceeds=quantity * self.unit_proceeds,
            rule=rule,
            acquisition_date=acquisition_date,
        ))


def validate(ledger:Ledger, sell_date:datetime.date, requested_quantity:Decimal) -> None:
    if not requested_quantity > Decimal(0):
        raise ValueError(f'shares to sell must be positive, got {requested_quantity}')
    held = ledger.total_held_before(sell_date)
    if requested_quantity > held:
        raise InsufficientShares(held, requested_quantity)


class Matcher:

    def __init__(self, ledger:Ledger, normalizer:Normalizer):
        self.ledger = ledger
        self.normalizer = normalizer
        self.pool = Section104Pool()
        self.pool_updates: list[PoolUpdate] = []

    def match(self, sell_date:datetime.date, quantity:Decimal, unit_proceeds:Decimal=Decimal(0)) -> list[MatchedLot]:
        '''Identify quantity shares disposed on sell_date.

        Disposals already in the ledger before sell_date are replayed first,
        so that they take their own Bed & Breakfast matches and Section 104
        shares before the requested disposal does.
        '''

        horizon = sell_date + datetime.timedelta(days=bed_and_breakfast_days)

        # Lots are keyed by transaction identity, as identical transactions
        # may legitimately appear more than once
        lots: dict[int, Lot] = {}
        for tr in self.ledger.acquisitions_before(horizon):
            lots[id(tr)] = Lot(tr, tr.quantity, normalizer=self.normalizer)

        disposals = [_Disposal(tr.date, tr.quantity, tr.quantity) for tr in self.ledger.disposals_before(sell_date)]
        disposal = _Disposal(sell_date, quantity, quantity, unit_proceeds)
        disposals.append(disposal)

        self._match_bed_and_breakfast(disposals, lots)
        self._match_section104(sell_date, disposals, lots)

        matched = sum((m.quantity for m in disposal.matches), Decimal(0))
        assert matched == quantity

        return disposal.matches

    def _match_bed_and_breakfast(self, disposals:list[_Disposal], lots:dict[int, Lot]) -> None:
        # Earlier disposals take precedence
        for disposal in disposals:
            for tr in self.ledger.acquisitions_within(disposal.date, bed_and_breakfast_days):
                if not disposal.unidentified:
                    break
                lot = lots[id(tr)]
                if not lot.remaining:
                    continue
                identified = min(disposal.unidentified, lot.remaining)
                cost = lot.consume(identified)
                logger.debug(f'{disposal.date}: {identified} shares matched with {lot.date} acquisition (B&B)')
                disposal.identify(identified, cost, Rule.BED_AND_BREAKFAST, lot.date)

    def _match_section104(self, sell_date:datetime.date, disposals:list[_Disposal], lots:dict[int, Lot]) -> None:
        self.pool = Section104Pool()
        self.pool_updates = []

        # Acquisitions sort before same-day disposals
        events: list[tuple[datetime.date, int, Lot|_Disposal]] = []
        for tr in self.ledger.acquisitions_before(sell_date):
            events.append((tr.date, 0, lots[id(tr)]))
        for disposal in disposals:
            events.append((disposal.date, 1, disposal))
        events.sort(key=operator.itemgetter(0, 1))

        for date, _, event in events:
            if isinstance(event, Lot):
                lot = event
                if not lot.remaining:
                    continue
                shares = lot.remaining
                cost = lot.consume(shares)
                self.pool.add(shares, cost)
                self._update(date, f'Bought {shares} shares', shares, cost)
            else:
                disposal = event
                if disposal.unidentified and self.pool.quantity:
                    identified = min(disposal.unidentified, self.pool.quantity)
                    cost = self.pool.remove(identified)
                    logger.debug(f'{disposal.date}: {identified} shares matched with S.104 holding')
                    disposal.identify(identified, cost, Rule.SECTION_104)
                    self._update(date, f'Sold {disposal.shares} shares', -identified, -cost)
                if disposal.unidentified:
                    raise MatchingExhausted(disposal.date, disposal.unidentified)

    def _update(self, date:datetime.date, description:str, quantity:Decimal, delta_cost:Decimal) -> None:
        self.pool_updates.append(PoolUpdate(
            date=date,
            description=description,
            quantity=quantity,
            delta_cost=delta_cost,
            pool_quantity=self.pool.quantity,
            pool_cost=self.pool.cost,
        ))
