from fastapi.testclient import TestClient


REQUIRED_ROUTES = {
    "/auth/validate-product-key",
    "/auth/register-admin",
    "/auth/login",
    "/auth/token",
    "/auth/me",
    "/auth/logout",
    "/auth/updatepassword",
    "/users/register-staff",
    "/users/staff",
    "/users/staff/{staff_id}",
    "/restaurants/{restaurant_id}",
    "/restaurants/{restaurant_id}/staff",
}


def test_api_startup_and_router_registration(monkeypatch):
    from backoffice import main

    monkeypatch.setattr(main, "_startup_tasks", lambda: None)

    with TestClient(main.app) as client:
        response = client.get("/")
        docs_response = client.get("/docs")
        openapi_response = client.get("/openapi.json")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert docs_response.status_code == 200
    assert openapi_response.status_code == 200

    paths = set(openapi_response.json()["paths"])
    assert REQUIRED_ROUTES.issubset(paths)


def test_real_startup_tasks_run_on_sqlite():
    from backoffice import main

    with TestClient(main.app) as client:
        response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}
