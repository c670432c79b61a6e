# -*- coding: utf-8 -*-
"""
Project Online calendar and calendar exception resources.

Calendars live below {pwa_url}/_api/ProjectServer/Calendars. An exception
marks working time that differs from the base calendar (holidays, shift
changes) and can recur.
"""

from dataclasses import dataclass, fields
from datetime import date, datetime
from enum import IntEnum, IntFlag
from .paths import odata_literal
from .resources import Resource
from .utils import is_debug_enabled


class CalendarRecurrenceDays(IntFlag):
    """Days of the week for recurring calendar exceptions"""

    NOT_SPECIFIED = 0
    SUNDAY = 1
    MONDAY = 2
    TUESDAY = 4
    WEDNESDAY = 8
    THURSDAY = 16
    FRIDAY = 32
    SATURDAY = 64


class CalendarRecurrenceType(IntEnum):
    DAILY = 0
    DAILY_SKIP = 1
    WEEKLY = 2
    MONTHLY = 3
    YEARLY = 4


class CalendarRecurrenceWeek(IntEnum):
    """One week of a month, used for monthly recurrences"""

    NOT_SPECIFIED = 0
    FIRST = 1
    SECOND = 2
    THIRD = 3
    FOURTH = 4
    LAST = 5


@dataclass
class CalendarExceptionCreationInformation:
    """
    Information for creating a calendar exception.

    Shift start/finish values are minutes from midnight. Unset fields are
    left out of the request body so the server applies its defaults.
    """

    start: datetime = None
    finish: datetime = None
    name: str = None
    recurrence_days: CalendarRecurrenceDays = None
    recurrence_frequency: int = None
    recurrence_month: int = None
    recurrence_month_day: int = None
    recurrence_type: CalendarRecurrenceType = None
    recurrence_week: CalendarRecurrenceWeek = None
    shift1_start: int = None
    shift1_finish: int = None
    shift2_start: int = None
    shift2_finish: int = None
    shift3_start: int = None
    shift3_finish: int = None
    shift4_start: int = None
    shift4_finish: int = None
    shift5_start: int = None
    shift5_finish: int = None

    def to_dict(self):
        """
        Serialize to the REST body shape.

        Returns:
            dict: PascalCase keys (RecurrenceDays, Shift1Start, ...) with
            ISO-8601 dates and integer enum values
        """
        body = {}
        for field in fields(self):
            value = getattr(self, field.name)
            if value is None:
                continue
            if isinstance(value, (datetime, date)):
                value = value.isoformat()
            elif isinstance(value, (IntEnum, IntFlag)):
                value = int(value)
            body[_rest_name(field.name)] = value
        return body


def _rest_name(attribute):
    # shift1_start -> Shift1Start, recurrence_month_day -> RecurrenceMonthDay
    return ''.join(part[:1].upper() + part[1:] for part in attribute.split('_'))


@dataclass
class CommandResult:
    """
    Outcome of a create command.

    Attributes:
        data (dict): Raw parsed response
        instance (Resource): Proxy for the created entity
    """

    data: object
    instance: Resource


class Calendars(Resource):
    """Collection of enterprise calendars"""

    default_path = 'Calendars'

    def get_by_id(self, calendar_id):
        """
        Get a calendar by its GUID.

        Args:
            calendar_id (str): Calendar identifier
        """
        return self._with_key(Calendar, odata_literal(str(calendar_id)))


class Calendar(Resource):
    """An enterprise calendar"""

    @property
    def base_calendar_exceptions(self):
        return self._child(CalendarExceptionCollection, 'BaseCalendarExceptions')

    def delete(self):
        return self._delete()


class CalendarExceptionCollection(Resource):
    """Collection of calendar exceptions"""

    def get_by_id(self, exception_id):
        """
        Get a calendar exception by its integer id.

        Args:
            exception_id (int): Calendar exception identifier
        """
        return self._with_key(CalendarException, str(int(exception_id)))

    def add(self, parameters):
        """
        Add a calendar exception.

        Args:
            parameters (CalendarExceptionCreationInformation or dict): Start and
                finish dates, recurrence and shift information

        Returns:
            CommandResult: Raw response and a proxy for the new exception
        """
        if isinstance(parameters, CalendarExceptionCreationInformation):
            parameters = parameters.to_dict()

        if is_debug_enabled():
            print(f"[+] Adding calendar exception: {parameters.get('Name', '(unnamed)')}")

        data = self.post('add', json_body={'parameters': parameters})
        return CommandResult(data=data, instance=self.get_by_id(data['Id']))


class CalendarException(Resource):
    """A difference (an exception) from the base calendar"""

    @property
    def calendar(self):
        """The calendar the exception belongs to."""
        return self._child(Calendar, 'Calendar')

    def delete(self):
        return self._delete()


class BaseCalendarException(CalendarException):
    pass
