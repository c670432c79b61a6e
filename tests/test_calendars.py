"""Tests for Project Online calendar resources in sharepoint_files/calendars.py"""

from datetime import datetime

import pytest

from sharepoint_files.calendars import (
    BaseCalendarException,
    CalendarExceptionCreationInformation,
    CalendarRecurrenceDays,
    CalendarRecurrenceType,
    CalendarRecurrenceWeek,
    CommandResult,
)
from sharepoint_files.web import ProjectServer

PWA_URL = "https://contoso.sharepoint.com/sites/pwa"
CALENDAR_ID = "25ef0a8e-1bfd-e311-9421-00155d2c8519"
CALENDAR_URL = f"{PWA_URL}/_api/ProjectServer/Calendars('{CALENDAR_ID}')"


@pytest.fixture
def calendar(transport):
    return ProjectServer(transport, PWA_URL).calendars.get_by_id(CALENDAR_ID)


class TestCreationInformation:
    def test_only_set_fields_are_serialized(self):
        info = CalendarExceptionCreationInformation(
            name="Holiday",
            start=datetime(2024, 12, 25, 0, 0),
            finish=datetime(2024, 12, 26, 0, 0),
        )
        assert info.to_dict() == {
            "Name": "Holiday",
            "Start": "2024-12-25T00:00:00",
            "Finish": "2024-12-26T00:00:00",
        }

    def test_recurrence_and_shifts(self):
        info = CalendarExceptionCreationInformation(
            recurrence_type=CalendarRecurrenceType.WEEKLY,
            recurrence_days=CalendarRecurrenceDays.MONDAY | CalendarRecurrenceDays.FRIDAY,
            recurrence_week=CalendarRecurrenceWeek.LAST,
            recurrence_month_day=15,
            shift1_start=480,
            shift1_finish=720,
        )
        body = info.to_dict()
        assert body == {
            "RecurrenceType": 2,
            "RecurrenceDays": 34,
            "RecurrenceWeek": 5,
            "RecurrenceMonthDay": 15,
            "Shift1Start": 480,
            "Shift1Finish": 720,
        }
        assert all(type(value) is int for value in body.values())


class TestCalendarExceptions:
    def test_add(self, calendar, transport):
        transport.responder = lambda call: {"Id": 12, "Name": "Holiday"}
        info = CalendarExceptionCreationInformation(name="Holiday")

        result = calendar.base_calendar_exceptions.add(info)

        call = transport.calls[0]
        assert call.method == 'POST'
        assert call.url == f"{CALENDAR_URL}/BaseCalendarExceptions/add"
        assert call.json_body == {"parameters": {"Name": "Holiday"}}
        assert isinstance(result, CommandResult)
        assert result.data["Id"] == 12
        assert result.instance.path.url() == f"{CALENDAR_URL}/BaseCalendarExceptions(12)"

    def test_add_accepts_plain_dict(self, calendar, transport):
        transport.responder = lambda call: {"Id": 3}
        calendar.base_calendar_exceptions.add({"Name": "Training"})
        assert transport.calls[0].json_body == {"parameters": {"Name": "Training"}}

    def test_add_does_not_change_collection_path(self, calendar, transport):
        transport.responder = lambda call: {"Id": 1}
        exceptions = calendar.base_calendar_exceptions
        exceptions.add({"Name": "a"})
        exceptions.add({"Name": "b"})
        assert transport.urls == [f"{CALENDAR_URL}/BaseCalendarExceptions/add"] * 2

    def test_delete_and_calendar(self, calendar, transport):
        exception = calendar.base_calendar_exceptions.get_by_id(7)
        exception.delete()

        call = transport.calls[0]
        assert call.url == f"{CALENDAR_URL}/BaseCalendarExceptions(7)"
        assert call.headers == {'X-HTTP-Method': 'DELETE'}
        assert exception.calendar.path.url() == f"{CALENDAR_URL}/BaseCalendarExceptions(7)/Calendar"

    def test_base_calendar_exception_is_exception(self):
        from sharepoint_files.calendars import CalendarException
        assert issubclass(BaseCalendarException, CalendarException)
