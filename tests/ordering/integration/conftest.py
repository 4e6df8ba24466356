import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient
from ordering.api import ROUTERS, register_error_handlers
from ordering.domain import ordering


@pytest.fixture()
def client():
    app = FastAPI()

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        with ordering.domain_context():
            return await call_next(request)

    for router in ROUTERS:
        app.include_router(router)
    register_error_handlers(app)
    return TestClient(app)


@pytest.fixture()
def delivery():
    return {
        "address": "221B Residency Road",
        "city": "Bengaluru",
        "zip_code": "560025",
        "phone_number": "9876543210",
    }
