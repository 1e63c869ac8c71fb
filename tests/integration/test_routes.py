"""
Integration Tests - HTTP Routes

Exercises the pages end to end against the in-memory sample database.
"""
import pytest
import structlog
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError

from dadd_explorer.config import DatabaseSettings, Settings
from dadd_explorer.config.logging import configure_logging
from dadd_explorer.database import queries
from dadd_explorer.database.connection import QueryGateway
from dadd_explorer.main import create_app


class TestPages:
    """Tests for landing pages and health"""

    @pytest.mark.parametrize("path", ["/", "/admin"])
    async def test_landing_pages(self, client, path):
        response = await client.get(path)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "X-Request-ID" in response.headers
        assert response.headers["X-Content-Type-Options"] == "nosniff"

    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.text == "ok"

    async def test_health_unavailable(self, client, gateway, monkeypatch):
        async def broken_ping():
            raise OperationalError("SELECT 1", {}, Exception("connection refused"))

        monkeypatch.setattr(gateway, "ping", broken_ping)

        response = await client.get("/health")

        assert response.status_code == 503

    async def test_unknown_path_is_plain_text_404(self, client):
        response = await client.get("/nowhere")

        assert response.status_code == 404
        assert response.headers["content-type"].startswith("text/plain")
        assert response.headers["X-Frame-Options"] == "DENY"

    async def test_static_stylesheet(self, client):
        response = await client.get("/static/style.css")
        assert response.status_code == 200


class TestRegionRoutes:
    """Tests for Region CRUD"""

    async def test_list(self, client):
        response = await client.get("/regions")

        assert response.status_code == 200
        assert "Africa" in response.text
        assert "Europe" in response.text

    async def test_add_form(self, client):
        response = await client.get("/regions/add")

        assert response.status_code == 200
        assert 'action="/regions/add"' in response.text

    async def test_create_edit_delete_round_trip(self, client, gateway):
        response = await client.post("/regions/add", data={"region_name": "Oceania"})
        assert response.status_code == 303
        assert response.headers["location"] == "/regions"

        listing = await client.get("/regions")
        assert "Oceania" in listing.text

        created = [r for r in await gateway.fetch_all(queries.list_regions()) if r["region_name"] == "Oceania"]
        assert len(created) == 1
        region_id = created[0]["region_id"]

        form = await client.get(f"/regions/{region_id}/edit")
        assert form.status_code == 200
        assert 'value="Oceania"' in form.text

        response = await client.post(f"/regions/{region_id}/edit", data={"region_name": "Oceania & Pacific"})
        assert response.status_code == 303
        assert await gateway.fetch_one(queries.get_region(region_id)) == {
            "region_id": region_id,
            "region_name": "Oceania & Pacific",
        }

        response = await client.post(f"/regions/{region_id}/delete")
        assert response.status_code == 303

        listing = await client.get("/regions")
        assert "Oceania" not in listing.text
        assert await gateway.fetch_one(queries.get_region(region_id)) is None

    async def test_edit_form_for_missing_region(self, client):
        response = await client.get("/regions/999/edit")

        assert response.status_code == 404
        assert response.text == "Region not found"

    async def test_update_missing_region(self, client):
        response = await client.post("/regions/999/edit", data={"region_name": "Nowhere"})
        assert response.status_code == 404

    async def test_delete_missing_region(self, client):
        response = await client.post("/regions/999/delete")
        assert response.status_code == 404

    async def test_update_without_change_redirects(self, client):
        response = await client.post("/regions/1/edit", data={"region_name": "Africa"})
        assert response.status_code == 303


class TestSubRegionRoutes:
    """Tests for Sub-Region CRUD"""

    async def test_list_shows_region_name(self, client):
        response = await client.get("/subregions")

        assert response.status_code == 200
        assert "Sub-Saharan Africa" in response.text
        assert "Americas" in response.text

    async def test_add_form_lists_regions(self, client):
        response = await client.get("/subregions/add")

        assert response.status_code == 200
        for name in ("Africa", "Americas", "Asia", "Europe"):
            assert name in response.text

    async def test_create_with_and_without_region(self, client, gateway):
        await client.post("/subregions/add", data={"sub_region_name": "Melanesia", "region_id": "3"})
        await client.post("/subregions/add", data={"sub_region_name": "Antarctica", "region_id": ""})

        rows = {r["sub_region_name"]: r for r in await gateway.fetch_all(queries.list_sub_regions())}

        assert rows["Melanesia"]["region_name"] == "Asia"
        assert rows["Antarctica"]["region_id"] is None

    async def test_edit_and_delete(self, client, gateway):
        form = await client.get("/subregions/7/edit")
        assert form.status_code == 200
        assert "Northern Europe" in form.text

        response = await client.post(
            "/subregions/7/edit",
            data={"sub_region_name": "Nordic Europe", "region_id": "4"},
        )
        assert response.status_code == 303
        assert response.headers["location"] == "/subregions"
        assert await gateway.fetch_one(queries.get_sub_region(7)) == {
            "sub_region_id": 7,
            "sub_region_name": "Nordic Europe",
            "region_id": 4,
        }

        await client.post("/subregions/add", data={"sub_region_name": "Temporary", "region_id": "1"})
        temporary = [
            r for r in await gateway.fetch_all(queries.list_sub_regions())
            if r["sub_region_name"] == "Temporary"
        ][0]
        response = await client.post(f"/subregions/{temporary['sub_region_id']}/delete")
        assert response.status_code == 303
        assert await gateway.fetch_one(queries.get_sub_region(temporary["sub_region_id"])) is None

    async def test_missing_sub_region(self, client):
        assert (await client.get("/subregions/999/edit")).status_code == 404
        assert (await client.post("/subregions/999/delete")).status_code == 404


class TestRequestValidation:
    """Tests for malformed ids and empty form fields"""

    @pytest.mark.parametrize(
        "method,path,field",
        [
            ("GET", "/regions/abc/edit", "region_id"),
            ("POST", "/regions/abc/delete", "region_id"),
            ("GET", "/subregions/1.5/edit", "sub_region_id"),
            ("POST", "/subregions/x/edit", "sub_region_id"),
        ],
    )
    async def test_non_integer_id_is_plain_text_422(self, client, method, path, field):
        response = await client.request(method, path)

        assert response.status_code == 422
        assert response.headers["content-type"].startswith("text/plain")
        assert response.text == f"Invalid value for {field}"

    async def test_empty_region_name_is_stored(self, client, gateway):
        response = await client.post("/regions/add", data={"region_name": ""})

        assert response.status_code == 303
        names = [r["region_name"] for r in await gateway.fetch_all(queries.list_regions())]
        assert names[-1] == ""

    async def test_missing_region_name_on_edit_is_stored_empty(self, client, gateway):
        response = await client.post("/regions/2/edit", data={"submit": "Save"})

        assert response.status_code == 303
        assert (await gateway.fetch_one(queries.get_region(2)))["region_name"] == ""

    async def test_empty_sub_region_name_is_stored(self, client, gateway):
        response = await client.post("/subregions/add", data={"sub_region_name": "", "region_id": "2"})

        assert response.status_code == 303
        rows = [r for r in await gateway.fetch_all(queries.list_sub_regions()) if r["sub_region_name"] == ""]
        assert len(rows) == 1
        assert rows[0]["region_name"] == "Americas"


class TestIntermediateRegionRoutes:
    """Tests for the intermediate region list"""

    async def test_list(self, client):
        response = await client.get("/intermediate-regions")

        assert response.status_code == 200
        assert "Eastern Africa" in response.text
        assert "Sub-Saharan Africa" in response.text

    async def test_underscore_alias_redirects(self, client):
        response = await client.get("/intermediate_regions")

        assert response.status_code == 302
        assert response.headers["location"] == "/intermediate-regions"


class TestReportRoutes:
    """Tests for the report pages"""

    @pytest.mark.parametrize(
        "path",
        [
            "/feature1",
            "/feature1?country_id=",
            "/feature2",
            "/feature2?sub_region_id=1",
            "/feature2?decade=2000",
            "/feature2?sub_region_id=abc&decade=2000",
            "/feature3",
            "/feature3?region_id=1&decade=",
            "/feature8",
            "/feature8?summary_decade=&trend_country_id=",
        ],
    )
    async def test_missing_selection_renders_empty(self, client, path):
        response = await client.get(path)

        assert response.status_code == 200
        assert "<td>" not in response.text

    async def test_dropdowns_populated_without_selection(self, client):
        response = await client.get("/feature2")

        assert "Sub-Saharan Africa" in response.text
        assert 'value="2010"' in response.text

    async def test_country_trend(self, client):
        response = await client.get("/feature1?country_id=11")

        assert response.status_code == 200
        text = response.text
        assert text.index("<td>2010</td>") < text.index("<td>2000</td>") < text.index("<td>1990</td>")
        assert "52.50" in text

    async def test_sub_region_decade(self, client):
        response = await client.get("/feature2?sub_region_id=1&decade=2000")

        assert response.status_code == 200
        text = response.text
        assert text.index("Kenya") < text.index("Uganda") < text.index("Ghana")
        assert text.index("Nigeria") < text.index("Ethiopia")

    async def test_region_decade(self, client):
        response = await client.get("/feature3?region_id=4&decade=2010")

        assert response.status_code == 200
        text = response.text
        assert text.index("Northern Europe") < text.index("Western Europe")
        assert "78.67" in text

    async def test_search_default(self, client):
        response = await client.get("/feature4")

        assert response.status_code == 200
        assert "Showing the first 30 countries." in response.text
        assert "Argentina" in response.text

    async def test_search(self, client):
        response = await client.get("/feature4", params={"q": "  LAND "})

        assert response.status_code == 200
        text = response.text
        assert "4 match(es)" in text
        assert text.index("Finland") < text.index("Iceland") < text.index("Ireland") < text.index("Netherlands")
        assert "Kenya" not in text

    async def test_decade_summary(self, client):
        response = await client.get("/feature8?summary_decade=1990")

        assert response.status_code == 200
        text = response.text
        assert "<dd>8</dd>" in text
        assert "<dd>28.00</dd>" in text
        assert "Japan (70.00)" in text
        assert "Ethiopia (8.00)" in text

    async def test_trend_with_relative_bars(self, client):
        response = await client.get("/feature8?trend_country_id=2")

        assert response.status_code == 200
        text = response.text
        assert 'data-width="73"' in text
        assert 'data-width="0"' in text
        assert 'data-width="100"' in text

    async def test_summary_and_trend_together(self, client):
        response = await client.get("/feature8?summary_decade=2010&trend_country_id=11")

        text = response.text
        assert "France (80.00)" in text
        assert 'data-width="91"' in text


class TestErrorHandling:
    """Tests for uniform 500 handling"""

    @pytest.mark.parametrize(
        "path",
        [
            "/regions",
            "/subregions",
            "/intermediate-regions",
            "/feature1",
            "/feature2?sub_region_id=1&decade=2000",
            "/feature3",
            "/feature4?q=a",
            "/feature8",
        ],
    )
    async def test_store_failure_is_plain_text_500(self, client, gateway, monkeypatch, path):
        async def broken_fetch_all(statement, params=None):
            raise OperationalError("SELECT", {}, Exception("server has gone away"))

        monkeypatch.setattr(gateway, "fetch_all", broken_fetch_all)

        response = await client.get(path)

        assert response.status_code == 500
        assert response.headers["content-type"].startswith("text/plain")
        assert response.text.startswith("Error loading ")
        assert response.headers["X-Content-Type-Options"] == "nosniff"

    async def test_failed_write_is_500(self, client, gateway, monkeypatch):
        async def broken_execute(statement, params=None):
            raise OperationalError("INSERT", {}, Exception("read-only"))

        monkeypatch.setattr(gateway, "execute", broken_execute)

        response = await client.post("/regions/add", data={"region_name": "Oceania"})

        assert response.status_code == 500
        assert response.text == "Error loading /regions/add"


class TestLifespan:
    """Tests for application startup and shutdown"""

    async def test_unreachable_database_at_startup_keeps_serving(self, test_settings, gateway, monkeypatch):
        pings = []

        async def unreachable_ping():
            pings.append(True)
            raise OperationalError("SELECT 1", {}, Exception("connection refused"))

        monkeypatch.setattr(gateway, "ping", unreachable_ping)
        app = create_app(settings=test_settings, gateway=gateway)

        async with app.router.lifespan_context(app):
            assert pings == [True]
            async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
                response = await client.get("/regions")

        assert response.status_code == 200
        assert "Africa" in response.text
        # An injected gateway is left open at shutdown
        assert await gateway.fetch_one(queries.get_region(1)) is not None

    async def test_owned_gateway_is_built_and_disposed(self, monkeypatch):
        settings = Settings(
            app_env="testing",
            database=DatabaseSettings(DATABASE_URL="sqlite+aiosqlite:///:memory:"),
        )
        disposed = []
        original_dispose = QueryGateway.dispose

        async def tracking_dispose(self):
            disposed.append(self)
            await original_dispose(self)

        monkeypatch.setattr(QueryGateway, "dispose", tracking_dispose)
        app = create_app(settings=settings)

        async with app.router.lifespan_context(app):
            built = app.state.gateway
            assert isinstance(built, QueryGateway)
            assert str(built.engine.url) == "sqlite+aiosqlite:///:memory:"

        assert disposed == [built]


class TestRequestLogContext:
    """Tests for request-scoped log fields"""

    @pytest.fixture(autouse=True)
    def structured_logging(self, test_settings):
        configure_logging(settings=test_settings)
        yield
        structlog.contextvars.clear_contextvars()

    @staticmethod
    def _events(caplog, name):
        return [
            record.msg for record in caplog.records
            if isinstance(record.msg, dict) and record.msg.get("event") == name
        ]

    async def test_handler_log_carries_request_id(self, client, caplog):
        response = await client.post(
            "/regions/add",
            data={"region_name": "Oceania"},
            headers={"X-Request-ID": "req-42"},
        )

        assert response.headers["X-Request-ID"] == "req-42"
        created = self._events(caplog, "Region created")
        assert len(created) == 1
        assert created[0]["request_id"] == "req-42"
        assert created[0]["app"] == "dadd-explorer"
        assert created[0]["environment"] == "testing"

    async def test_failure_log_carries_request_id(self, client, gateway, monkeypatch, caplog):
        async def broken_fetch_all(statement, params=None):
            raise OperationalError("SELECT", {}, Exception("server has gone away"))

        monkeypatch.setattr(gateway, "fetch_all", broken_fetch_all)

        await client.get("/regions", headers={"X-Request-ID": "req-500"})

        failures = self._events(caplog, "Unhandled error")
        assert [event["request_id"] for event in failures] == ["req-500"]

    async def test_context_cleared_after_request(self, client):
        await client.get("/regions", headers={"X-Request-ID": "req-7"})

        assert structlog.contextvars.get_contextvars() == {}
