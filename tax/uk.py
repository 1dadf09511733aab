"""UK capital gains tax constants and functions."""


import datetime
import logging
import typing

from decimal import Decimal


logger = logging.getLogger('tax.uk')


class TaxYear(typing.NamedTuple):

    year1: int
    year2: int

    def __str__(self) -> str:
        return f'{self.year1}/{self.year2}'

    @classmethod
    def from_date(cls, date:datetime.date) -> 'TaxYear':
        if date < date.replace(date.year, 4, 6):
            year1, year2 = date.year - 1, date.year
        else:
            year1, year2 = date.year, date.year + 1
        return cls(year1, year2)


# https://www.gov.uk/guidance/capital-gains-tax-rates-and-allowances
# https://www.rossmartin.co.uk/capital-gains-tax/110-capital-gains-tax-rates-a-allowances
allowances = {
    (2008, 2009):  9600,
    (2009, 2010): 10100,
    (2010, 2011): 10100,
    (2011, 2012): 10600,
    (2012, 2013): 10600,
    (2013, 2014): 10900,
    (2014, 2015): 11000,
    (2015, 2016): 11100,
    (2016, 2017): 11100,
    (2017, 2018): 11300,
    (2018, 2019): 11700,
    (2019, 2020): 12000,
    (2020, 2021): 12300,
    (2021, 2022): 12300,
    (2022, 2023): 12300,
    (2023, 2024):  6000,
    (2024, 2025):  3000,
    (2025, 2026):  3000,
    (2026, 2027):  3000,
}


def allowance(tax_year:TaxYear) -> Decimal:
    try:
        amount = allowances[tax_year]
    except KeyError:
        logger.warning(f'capital gains allowance for {tax_year} tax year unknown')
        amount = 0
    return Decimal(amount)


# Basic and higher rates on shares, by start date
# https://www.gov.uk/government/publications/changes-to-capital-gains-tax-rates-from-30-october-2024
_cgt_rates = [
    (datetime.date(2008,  4,  6), (Decimal('0.18'), Decimal('0.18'))),
    (datetime.date(2010,  6, 23), (Decimal('0.18'), Decimal('0.28'))),
    (datetime.date(2016,  4,  6), (Decimal('0.10'), Decimal('0.20'))),
    (datetime.date(2024, 10, 30), (Decimal('0.18'), Decimal('0.24'))),
]


def cgt_rates(date:datetime.date) -> tuple[Decimal, Decimal]:
    if date < _cgt_rates[0][0]:
        raise ValueError(f'{date}: disposals before 6 April 2008 unsupported')
    rates = _cgt_rates[0][1]
    for start_date, rates_ in _cgt_rates:
        if date >= start_date:
            rates = rates_
    return rates
