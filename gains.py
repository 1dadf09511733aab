'''Gain and tax computation for a single disposal.'''


#
# Copyright (c) 2025 LateGenXer
#
# SPDX-License-Identifier: AGPL-3.0-or-later
#


import dataclasses
import datetime
import logging

from enum import Enum
from decimal import Decimal, ROUND_HALF_UP

import environ

from currency import Normalizer
from errors import InvalidRate
from matching import MatchedLot, PoolUpdate, Rule
from report import Report, currency_symbol, money
from tax import uk


__all__ = [
    'TaxpayerStatus',
    'Config',
    'GainReport',
    'GainCalculator',
]


logger = logging.getLogger('gains')


TaxpayerStatus = Enum('TaxpayerStatus', ['BASIC', 'HIGHER'])


@dataclasses.dataclass(frozen=True)
class Config:
    home_currency: str
    annual_allowance: Decimal
    basic_rate: Decimal
    higher_rate: Decimal

    @classmethod
    def for_date(cls, date:datetime.date, **overrides) -> 'Config':
        '''Defaults for the tax year of date, with None overrides ignored.'''
        basic_rate, higher_rate = uk.cgt_rates(date)
        values = {
            'home_currency': environ.home_currency,
            'annual_allowance': uk.allowance(uk.TaxYear.from_date(date)),
            'basic_rate': basic_rate,
            'higher_rate': higher_rate,
        }
        for name, value in overrides.items():
            if name not in values:
                raise TypeError(f'unexpected configuration {name!r}')
            if value is not None:
                values[name] = value
        return cls(**values)

    def rate(self, status:TaxpayerStatus) -> Decimal:
        rate = self.basic_rate if status == TaxpayerStatus.BASIC else self.higher_rate
        if not (Decimal(0) < rate <= Decimal(1)):
            raise InvalidRate(rate)
        return rate


@dataclasses.dataclass
class GainReport:
    date: datetime.date
    symbol: str
    quantity: Decimal
    proceeds: Decimal
    cost: Decimal
    net_gain: Decimal
    allowance: Decimal
    taxable_amount: Decimal
    rate_applied: Decimal
    tax_due: Decimal
    matched_lots: list[MatchedLot] = dataclasses.field(default_factory=list)
    pool_updates: list[PoolUpdate] = dataclasses.field(default_factory=list)
    home_currency: str = 'GBP'

    def _cost(self, rule:Rule) -> Decimal:
        return sum((m.cost for m in self.matched_lots if m.rule == rule), Decimal(0))

    def _money(self, amount:Decimal) -> str:
        return money(amount, currency_symbol(self.home_currency))

    @property
    def bed_and_breakfast_cost(self) -> Decimal:
        return self._cost(Rule.BED_AND_BREAKFAST)

    @property
    def section104_cost(self) -> Decimal:
        return self._cost(Rule.SECTION_104)

    def write(self, report:Report) -> None:
        report.start(f'CGT on {self.quantity} {self.symbol} sold on {self.date}')

        report.write_heading(f'CGT due: {self._money(self.tax_due)}')

        report.write_heading('Breakdown', level=2)
        report.write_list([
            f'Proceeds: {self._money(self.proceeds)}',
            f'Bed & breakfast cost: {self._money(self.bed_and_breakfast_cost)}',
            f'Section 104 cost: {self._money(self.section104_cost)}',
            f'Net proceeds: {self._money(self.net_gain)}',
            f'Allowance: {self._money(self.allowance)}',
            f'Amount subject to CGT: {self._money(self.taxable_amount)}',
            f'CGT rate: {(self.rate_applied * 100).normalize():f}%',
            f'Net proceeds after CGT: {self._money(self.proceeds - self.tax_due)}',
        ])

        if self.matched_lots:
            report.write_heading('Matched shares', level=2)
            rows = []
            for m in self.matched_lots:
                if m.rule == Rule.BED_AND_BREAKFAST:
                    description = f'acquired on {m.acquisition_date} (B&B)'
                else:
                    description = 'S.104 holding'
                rows.append([m.quantity, description, self._money(m.cost), self._money(m.proceeds)])
            report.write_table(rows, header=['Shares', 'Identification', 'Cost', 'Proceeds'], just='rlrr', indent='  ')

        if self.pool_updates:
            report.write_heading('Section 104 holding', level=2)
            rows = []
            for update in self.pool_updates:
                rows.append([update.date, update.description, update.quantity, self._money(update.delta_cost), update.pool_quantity, self._money(update.pool_cost)])
            report.write_table(rows, header=['Date', 'Description', 'Shares', 'ΔCost', 'Pool shares', 'Pool cost'], just='clrrrr', indent='  ')

        report.write_paragraph(f'Generated by cgtcalc.py version {environ.version}.')

        report.end()


class GainCalculator:

    def __init__(self, config:Config, normalizer:Normalizer):
        self.config = config
        self.normalizer = normalizer

    def compute(self, matched_lots:list[MatchedLot], sale_unit_price:Decimal, sale_currency:str, sell_date:datetime.date, taxpayer_status:TaxpayerStatus, symbol:str='') -> GainReport:
        rate = self.config.rate(taxpayer_status)

        quantity = sum((m.quantity for m in matched_lots), Decimal(0))
        proceeds = self.normalizer.convert(quantity * sale_unit_price, sale_currency, sell_date)
        cost = sum((m.cost for m in matched_lots), Decimal(0))

        # Losses are not refunded
        net_gain = proceeds - cost
        taxable_amount = max(net_gain - self.config.annual_allowance, Decimal(0))
        tax_due = (taxable_amount * rate).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)

        logger.info(f'{sell_date}: proceeds {proceeds:.2f}, cost {cost:.2f}, gain {net_gain:.2f}, tax due {tax_due}')

        return GainReport(
            date=sell_date,
            symbol=symbol,
            quantity=quantity,
            proceeds=proceeds,
            cost=cost,
            net_gain=net_gain,
            allowance=self.config.annual_allowance,
            taxable_amount=taxable_amount,
            rate_applied=rate,
            tax_due=tax_due,
            matched_lots=list(matched_lots),
            home_currency=self.config.home_currency,
        )
