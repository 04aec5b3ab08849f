import json
from datetime import date

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel

from astrolog import create_app
from astrolog.api.deps import get_db, require_user
from astrolog.db.session import build_engine, init_db
from astrolog.models import (
    Camera,
    ImageRun,
    ImagingFilter,
    ImagingSession,
    Location,
    Mount,
    RunFilter,
    Target,
    Telescope,
)
from astrolog.services.auth import AuthContext
from astrolog.services.auth_provider import AuthProviderClient

GOOD_CODE = "good-code"
IMPLICIT_ACCESS_TOKEN = "implicit-access"


@pytest.fixture
def engine():
    """
    A fresh in-memory database for every test. StaticPool keeps the single
    connection alive so every session sees the same data, and foreign keys
    are switched on so cascades behave like the hosted database.
    """
    test_engine = build_engine("sqlite://", poolclass=StaticPool)
    init_db(test_engine)
    try:
        yield test_engine
    finally:
        SQLModel.metadata.drop_all(test_engine)
        test_engine.dispose()


@pytest.fixture
def db_session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def provider_requests():
    return []


@pytest.fixture
def auth_provider(provider_requests):
    """Auth provider client wired to an in-process fake of the provider API."""

    def handler(request: httpx.Request) -> httpx.Response:
        provider_requests.append(request)
        path = request.url.path
        if path == "/auth/v1/otp":
            return httpx.Response(200, json={})
        if path == "/auth/v1/token":
            body = json.loads(request.content)
            if body.get("auth_code") == GOOD_CODE:
                return httpx.Response(
                    200,
                    json={
                        "access_token": "pkce-access",
                        "refresh_token": "pkce-refresh",
                        "expires_in": 3600,
                        "user": {"id": "user-1", "email": "observer@example.com"},
                    },
                )
            return httpx.Response(400, json={"error_description": "invalid flow state"})
        if path == "/auth/v1/user":
            if request.headers.get("authorization") == f"Bearer {IMPLICIT_ACCESS_TOKEN}":
                return httpx.Response(200, json={"id": "user-2", "email": "implicit@example.com"})
            return httpx.Response(401, json={"msg": "invalid JWT"})
        if path == "/auth/v1/logout":
            return httpx.Response(204)
        return httpx.Response(404, json={"msg": "not found"})

    client = AuthProviderClient(
        base_url="https://auth.example.test",
        anon_key="anon-key",
        transport=httpx.MockTransport(handler),
    )
    yield client
    client.close()


@pytest.fixture
def app(engine, auth_provider):
    application = create_app(auth_provider=auth_provider, auth_context=AuthContext())

    def _get_test_db():
        with Session(engine) as session:
            yield session

    application.dependency_overrides[get_db] = _get_test_db
    return application


@pytest.fixture
def client(app):
    """Test client that is past the auth gate."""

    app.dependency_overrides[require_user] = lambda: None
    return TestClient(app)


@pytest.fixture
def anon_client(app):
    """Test client with the auth gate in place and nobody signed in."""

    return TestClient(app)


@pytest.fixture
def equipment(db_session):
    """Lookup rows most tests need: three filters plus one of each equipment kind."""

    rows = {
        "L": ImagingFilter(name="L", sort_order=1),
        "R": ImagingFilter(name="R", sort_order=2),
        "Ha": ImagingFilter(name="Ha", sort_order=5),
        "telescope": Telescope(name="Esprit 100"),
        "mount": Mount(name="EQ6-R"),
        "camera": Camera(name="ASI2600MM"),
        "location": Location(name="Back garden"),
    }
    db_session.add_all(rows.values())
    db_session.commit()
    return {
        "L": rows["L"].filter_id,
        "R": rows["R"].filter_id,
        "Ha": rows["Ha"].filter_id,
        "telescope": rows["telescope"].telescope_id,
        "mount": rows["mount"].mount_id,
        "camera": rows["camera"].camera_id,
        "location": rows["location"].location_id,
    }


@pytest.fixture
def make_logbook(db_session, equipment):
    """
    Build a target with sessions, runs and lines directly in the database.

    ``layout`` maps session dates to a list of runs; each run is
    ``(run_date, [(filter_key, exposures, exposure_sec), ...])``.
    """

    def _make(catalog_no, layout, description=None):
        target = Target(catalog_no=catalog_no, description=description)
        db_session.add(target)
        db_session.flush()
        for session_date, runs in layout.items():
            session_row = ImagingSession(
                target_id=target.target_id,
                session_date=session_date,
                telescope_id=equipment["telescope"],
                camera_id=equipment["camera"],
            )
            db_session.add(session_row)
            db_session.flush()
            for panel_no, (run_date, lines) in enumerate(runs, start=1):
                run = ImageRun(
                    session_id=session_row.session_id,
                    run_date=run_date,
                    panel_no=panel_no,
                    panel_name=f"Panel {panel_no}",
                )
                db_session.add(run)
                db_session.flush()
                for filter_key, exposures, exposure_sec in lines:
                    db_session.add(
                        RunFilter(
                            image_run_id=run.image_run_id,
                            filter_id=equipment[filter_key],
                            exposures=exposures,
                            exposure_sec=exposure_sec,
                        )
                    )
        db_session.commit()
        return target.target_id

    return _make


@pytest.fixture
def m31(make_logbook):
    """M31 over two nights: 3000s + 600s on the first, 1800s on the second."""

    return make_logbook(
        "M31",
        {
            date(2024, 3, 5): [
                (date(2024, 3, 5), [("L", 10, 180), ("R", 4, 300)]),
                (date(2024, 3, 6), [("Ha", 2, 300)]),
            ],
            date(2024, 3, 9): [(date(2024, 3, 9), [("L", 30, 60)])],
        },
        description="Andromeda Galaxy",
    )
