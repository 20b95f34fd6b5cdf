"""VacancySearchService 유닛 테스트 (FakeHttpClient 주입)"""
import json
from datetime import date

import pytest

from busca_vagas.core.exceptions import (
    ApplicationException,
    ErrorKind,
    InvalidWeekendCountException,
    TransientServerException,
)
from busca_vagas.crawlers.http_client import HttpResponse
from busca_vagas.engine import NO_AVAILABILITY_SUMMARY, SearchStatus
from busca_vagas.schemas.vacancy_schema import VacancySearchRequest
from busca_vagas.services.impl.vacancy_service import extract_from_data, validate_weekend_count
from conftest import UPSTREAM_BASE_URL, FakeHttpClient, json_response, status_response
from fixtures import upstream_payloads, vacancy_pages


pytestmark = pytest.mark.unit


def make_request(checkin="2025-11-07", checkout="2025-11-09", hotel_filter="-1"):
    return VacancySearchRequest(hotel_filter=hotel_filter, checkin_date=checkin, checkout_date=checkout)


class TestSearch:
    @pytest.mark.asyncio
    async def test_search_builds_query_string(self, make_service):
        client = FakeHttpClient([json_response(vacancy_pages.SINGLE_BLUES)])
        service = make_service(client)

        await service.search(make_request(hotel_filter="4"))

        assert client.calls == [
            f"{UPSTREAM_BASE_URL}/vagas/search?hotel=4&checkin=2025-11-07&checkout=2025-11-09"
        ]

    @pytest.mark.asyncio
    async def test_search_extracts_from_raw_html(self, make_service):
        client = FakeHttpClient([json_response({"html": vacancy_pages.MULTI_HOTEL})])
        service = make_service(client)

        result = await service.search(make_request())

        assert result.status is SearchStatus.AVAILABLE
        assert list(result.vacancies) == vacancy_pages.MULTI_HOTEL_VACANCIES
        assert result.query_details.total_vacancies_found == 4

    @pytest.mark.asyncio
    async def test_search_with_structured_data(self, make_service):
        client = FakeHttpClient([json_response(upstream_payloads.STRUCTURED_SEARCH_DATA)])
        service = make_service(client)

        result = await service.search(make_request())

        assert result.has_availability is True
        assert result.summary == "Found vacancies in 2 hotel(s): Amparo, Areado"
        assert len(result.vacancies) == 2

    @pytest.mark.asyncio
    async def test_search_no_availability(self, make_service):
        client = FakeHttpClient([json_response(vacancy_pages.SENTINEL_ONLY)])
        service = make_service(client)

        result = await service.search(make_request())

        assert result.status is SearchStatus.NO_AVAILABILITY
        assert result.summary == NO_AVAILABILITY_SUMMARY
        assert result.has_no_room_message is True

    @pytest.mark.asyncio
    async def test_search_mixed_page_keeps_hotels_with_rooms(self, make_service):
        client = FakeHttpClient([json_response(vacancy_pages.MIXED_SECTIONS)])
        service = make_service(client)

        result = await service.search(make_request())

        assert result.status is SearchStatus.AVAILABLE
        assert list(result.vacancies) == [
            "Hotel Areado: Perdizes (até 4 pessoas) 01/11 - 03/11 (2 dias livres) - 1 Quarto(s)",
        ]
        assert result.summary == "Found vacancies in 1 hotel(s): Hotel Areado"
        assert result.has_no_room_message is True

    @pytest.mark.asyncio
    async def test_search_propagates_upstream_failure(self, make_service, recording_sleep):
        client = FakeHttpClient([status_response(503) for _ in range(3)])
        service = make_service(client)

        with pytest.raises(TransientServerException):
            await service.search(make_request())

        assert len(client.calls) == 3
        assert recording_sleep.delays == [1.0, 2.0]

    def test_extract_from_data_prefers_raw_payload(self):
        data = dict(upstream_payloads.STRUCTURED_SEARCH_DATA, html=vacancy_pages.SINGLE_BLUES)

        result = extract_from_data(data)

        assert list(result.hotel_groups) == ["Hotel Amparo"]


class TestWeekendSearch:
    @pytest.mark.parametrize("count", [0, 13, -1, True, "8", 2.0, None])
    def test_validate_weekend_count_rejects(self, count):
        with pytest.raises(InvalidWeekendCountException) as exc_info:
            validate_weekend_count(count)

        assert "between 1 and 12" in exc_info.value.message
        assert exc_info.value.kind is ErrorKind.VALIDATION_ERROR

    @pytest.mark.parametrize("count", [1, 8, 12])
    def test_validate_weekend_count_accepts(self, count):
        assert validate_weekend_count(count) == count

    @pytest.mark.asyncio
    @pytest.mark.parametrize("count", [0, 13])
    async def test_invalid_count_makes_no_network_call(self, make_service, count):
        client = FakeHttpClient([])
        service = make_service(client)

        with pytest.raises(InvalidWeekendCountException):
            await service.search_weekends(count)

        assert client.calls == []

    @pytest.mark.asyncio
    async def test_search_weekends_parses_batch_result(self, make_service):
        client = FakeHttpClient([json_response(upstream_payloads.WEEKEND_SEARCH_DATA)])
        service = make_service(client)

        result = await service.search_weekends(2)

        assert client.calls == [f"{UPSTREAM_BASE_URL}/vagas/search/weekends?count=2"]
        assert result.weekends_searched == 2
        assert result.weekends_with_vacancies == 1

        first, second = result.weekends
        assert first.request.checkin_iso == "2025-11-07"
        assert first.request.checkout_iso == "2025-11-09"
        assert first.has_availability is True
        assert second.is_error is False
        assert second.result.status is SearchStatus.NO_AVAILABILITY

    @pytest.mark.asyncio
    async def test_search_weekends_entry_failures(self, make_service):
        data = {"weekendResults": [
            {"friday": "2025-11-21", "sunday": "2025-11-23", "success": False, "error": "Scraper crashed"},
            {"dates": "broken"},
            "not-an-entry",
        ]}
        client = FakeHttpClient([json_response(data)])
        service = make_service(client)

        result = await service.search_weekends(3)

        assert result.weekends_searched == 1
        weekend = result.weekends[0]
        assert weekend.is_error is True
        assert weekend.error_code == "APPLICATION_ERROR"
        assert weekend.error_message == "Scraper crashed"

    @pytest.mark.asyncio
    async def test_search_weekends_without_results(self, make_service):
        client = FakeHttpClient([json_response({"searchDetails": {}})])
        service = make_service(client)

        result = await service.search_weekends(1)

        assert result.weekends == ()
        assert result.weekends_with_vacancies == 0

    @pytest.mark.asyncio
    async def test_upcoming_weekends_are_independent(self, make_service):
        def handler(url):
            if "checkin=2025-10-24" in url:
                return status_response(503)
            if "checkin=2025-10-31" in url:
                return RuntimeError("socket exploded")
            return json_response(vacancy_pages.SINGLE_BLUES)

        client = FakeHttpClient(handler=handler)
        service = make_service(client)

        result = await service.search_upcoming_weekends(3, today=date(2025, 10, 22))

        assert [w.request.checkin_iso for w in result.weekends] == [
            "2025-10-24", "2025-10-31", "2025-11-07",
        ]
        failed_5xx, failed_unknown, ok = result.weekends

        assert failed_5xx.error_kind is ErrorKind.TRANSIENT_SERVER_ERROR
        assert failed_5xx.error_code == "SERVER_ERROR"
        assert failed_unknown.error_kind is ErrorKind.UNKNOWN
        assert failed_unknown.error_message == "socket exploded"
        assert ok.has_availability is True
        assert result.weekends_with_vacancies == 1
        # 5xx 주말만 재시도 (3회)
        assert sum("checkin=2025-10-24" in url for url in client.calls) == 3

    @pytest.mark.asyncio
    async def test_upcoming_weekends_invalid_count(self, make_service):
        client = FakeHttpClient([])
        service = make_service(client)

        with pytest.raises(InvalidWeekendCountException):
            await service.search_upcoming_weekends(13)

        assert client.calls == []


class TestHotels:
    @pytest.mark.asyncio
    async def test_hotels_are_cached(self, make_service):
        client = FakeHttpClient([json_response(upstream_payloads.HOTELS)])
        service = make_service(client)

        first = await service.get_hotels()
        second = await service.get_hotels()

        assert [h.hotel_id for h in first] == ["-1", "4", "5"]
        assert first == second
        assert client.calls == [f"{UPSTREAM_BASE_URL}/vagas/hoteis"]

    @pytest.mark.asyncio
    async def test_refresh_hotels(self, make_service):
        client = FakeHttpClient([
            json_response(upstream_payloads.HOTELS),
            json_response(upstream_payloads.HOTELS[:2]),
        ])
        service = make_service(client)

        await service.get_hotels()
        refreshed = await service.refresh_hotels()

        assert len(refreshed) == 2
        assert len(await service.get_hotels()) == 2
        assert len(client.calls) == 2

    @pytest.mark.asyncio
    async def test_hotel_cache_expires_after_24h(self, make_service, fake_clock):
        client = FakeHttpClient([
            json_response(upstream_payloads.HOTELS),
            json_response(upstream_payloads.HOTELS),
        ])
        service = make_service(client)

        await service.get_hotels()
        fake_clock.advance(24 * 3600)
        await service.get_hotels()

        assert len(client.calls) == 2

    @pytest.mark.asyncio
    async def test_invalid_hotel_payload_not_cached(self, make_service):
        client = FakeHttpClient([
            json_response({"hotels": "nope"}),
            json_response(upstream_payloads.HOTELS),
        ])
        service = make_service(client)

        with pytest.raises(ApplicationException):
            await service.get_hotels()
        assert service.cache_stats().exists is False

        hotels = await service.get_hotels()
        assert len(hotels) == 3

    @pytest.mark.asyncio
    async def test_invalid_entries_skipped(self, make_service):
        client = FakeHttpClient([json_response([{"hotelId": "4", "name": "Amparo"}, {"name": None}, 7])])
        service = make_service(client)

        hotels = await service.get_hotels()

        assert [h.name for h in hotels] == ["Amparo"]

    @pytest.mark.asyncio
    async def test_scrape_hotels_is_not_cached(self, make_service):
        client = FakeHttpClient([
            json_response(upstream_payloads.HOTELS),
            json_response(upstream_payloads.HOTELS),
        ])
        service = make_service(client)

        await service.scrape_hotels()
        await service.scrape_hotels()

        assert client.calls == [f"{UPSTREAM_BASE_URL}/vagas/hoteis/scrape"] * 2
        assert service.cache_stats().exists is False

    @pytest.mark.asyncio
    async def test_cache_stats_and_clear(self, make_service):
        client = FakeHttpClient([json_response(upstream_payloads.HOTELS)])
        service = make_service(client)

        await service.get_hotels()

        stats = service.cache_stats()
        assert stats.exists is True
        assert stats.expired is False
        assert service.clear_cache() == 1
        assert service.cache_stats().exists is False


class TestHealth:
    @pytest.mark.asyncio
    async def test_health_without_envelope(self, make_service):
        client = FakeHttpClient([HttpResponse(200, json.dumps(upstream_payloads.HEALTH))])
        service = make_service(client)

        body = await service.check_health()

        assert body["status"] == "OK"
        assert client.calls == [f"{UPSTREAM_BASE_URL}/health"]

    @pytest.mark.asyncio
    async def test_health_success_false(self, make_service):
        client = FakeHttpClient([HttpResponse(200, json.dumps({"success": False, "error": "down"}))])
        service = make_service(client)

        with pytest.raises(ApplicationException) as exc_info:
            await service.check_health()

        assert exc_info.value.message == "down"

    @pytest.mark.asyncio
    async def test_health_not_json(self, make_service):
        client = FakeHttpClient([HttpResponse(200, "OK")])
        service = make_service(client)

        with pytest.raises(ApplicationException):
            await service.check_health()
