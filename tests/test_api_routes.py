"""HTTP tests for the directory service routes."""

import pytest
from fastapi.testclient import TestClient

from libs.common.config import DirectoryConfig
from service_directory.app.main import create_app
from tests.conftest import InMemoryIndexClient


def test_create_collection(client: TestClient, engine: InMemoryIndexClient) -> None:
    response = client.post("/0000/people")

    assert response.status_code == 201
    assert response.json() == {"message": "Collection people created successfully"}
    assert "people" in engine.collections


def test_create_existing_collection_returns_engine_error(client: TestClient) -> None:
    client.post("/0000/people")

    response = client.post("/0000/people")

    assert response.status_code == 500
    detail = response.json()["detail"]
    assert detail["error"] == "resource_already_exists_exception"
    assert detail["status_code"] == 400


def test_create_index_count(engine: InMemoryIndexClient, tmp_path) -> None:
    path = tmp_path / "one.csv"
    path.write_text("Name,Department\nA,Eng\n", encoding="utf-8")
    config = DirectoryConfig(directory_ingest_csv_path=str(path))

    with TestClient(create_app(config, engine)) as test_client:
        assert test_client.post("/0000/people").status_code == 201
        assert test_client.post("/index-data/people/Department").status_code == 201
        response = test_client.get("/employee-count/people")

    assert response.status_code == 200
    assert response.json() == {"count": 1}


def test_index_data_excludes_column(client: TestClient, engine: InMemoryIndexClient) -> None:
    response = client.post("/index-data/people/Department")

    assert response.status_code == 201
    assert response.json() == {"message": "Data indexed into people excluding Department"}
    documents = list(engine.collections["people"].values())
    assert len(documents) == 5
    assert all("Department" not in doc for doc in documents)
    assert client.get("/employee-count/people").json() == {"count": 5}


def test_index_data_missing_file(engine: InMemoryIndexClient, tmp_path) -> None:
    config = DirectoryConfig(directory_ingest_csv_path=str(tmp_path / "missing.csv"))

    with TestClient(create_app(config, engine)) as test_client:
        response = test_client.post("/index-data/people/Department")

    assert response.status_code == 500
    assert response.json()["detail"]["type"] == "RecordSourceError"
    assert engine.collections == {}


def test_index_data_aborts_on_engine_failure(config: DirectoryConfig) -> None:
    engine = InMemoryIndexClient(fail_on_write=2)

    with TestClient(create_app(config, engine)) as test_client:
        response = test_client.post("/index-data/people/Department")

    assert response.status_code == 500
    assert response.json()["detail"]["error"] == "mapper_parsing_exception"
    assert len(engine.collections["people"]) == 1


def test_search_by_column(client: TestClient) -> None:
    client.post("/index-data/people/EmployeeID")

    response = client.get("/search-by-column/people/Name/alice")

    assert response.status_code == 200
    hits = response.json()
    assert len(hits) == 1
    assert hits[0]["_source"] == {"Name": "Alice Johnson", "Department": "Eng"}
    assert "_id" in hits[0]


def test_search_missing_collection(client: TestClient) -> None:
    response = client.get("/search-by-column/nowhere/Name/alice")

    assert response.status_code == 500
    assert response.json()["detail"]["error"] == "index_not_found_exception"


def test_delete_employee(client: TestClient, engine: InMemoryIndexClient) -> None:
    client.post("/index-data/people/Department")
    document_id = next(iter(engine.collections["people"]))

    response = client.delete(f"/delete-employee/people/{document_id}")

    assert response.status_code == 200
    assert response.json() == {"message": f"Employee {document_id} deleted from people"}
    assert client.get("/employee-count/people").json() == {"count": 4}


def test_delete_unknown_employee_fails(client: TestClient) -> None:
    client.post("/0000/people")

    response = client.delete("/delete-employee/people/does-not-exist")

    assert response.status_code == 500
    assert response.json()["detail"]["status_code"] == 404


def test_department_facets(client: TestClient) -> None:
    client.post("/index-data/people/Name")

    response = client.get("/department-facets/people")

    assert response.status_code == 200
    assert response.json() == [
        {"key": "Eng", "count": 3},
        {"key": "Sales", "count": 2},
    ]


def test_department_facets_uses_configured_field(config: DirectoryConfig) -> None:
    config.directory_facet_field = "Name"
    engine = InMemoryIndexClient()

    with TestClient(create_app(config, engine)) as test_client:
        test_client.post("/index-data/people/Department")
        response = test_client.get("/department-facets/people")

    assert response.status_code == 200
    assert len(response.json()) == 5


@pytest.mark.parametrize("method,path", [
    ("post", "/0000/people"),
    ("post", "/index-data/people/Department"),
    ("get", "/search-by-column/people/Name/alice"),
    ("get", "/employee-count/people"),
    ("delete", "/delete-employee/people/abc"),
    ("get", "/department-facets/people"),
])
def test_unreachable_engine_fails_every_route(unreachable_client: TestClient, method, path) -> None:
    response = getattr(unreachable_client, method)(path)

    assert response.status_code == 500
    detail = response.json()["detail"]
    assert detail["type"] == "ConnectionError"
    assert detail["error"] == "Connection refused"


def test_health(client: TestClient, unreachable_client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "healthy", "service": "directory-service"}
    assert unreachable_client.get("/health").status_code == 503


def test_metrics_endpoint(client: TestClient) -> None:
    client.get("/employee-count/people")

    response = client.get("/metrics")

    assert response.status_code == 200
    assert "http_requests_total" in response.text
    assert 'endpoint="/employee-count/{collection_name}"' in response.text


def test_metrics_unmatched_path_uses_fixed_label(client: TestClient) -> None:
    assert client.get("/no/such/route/abc123").status_code == 404

    response = client.get("/metrics")

    assert 'endpoint="unmatched"' in response.text
    assert "abc123" not in response.text


def test_root_lists_endpoints(client: TestClient) -> None:
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["endpoints"]["facets"] == "/department-facets/{collection_name}"
    assert "X-Process-Time" in response.headers


def test_injected_client_is_not_closed(config: DirectoryConfig, engine: InMemoryIndexClient) -> None:
    with TestClient(create_app(config, engine)):
        pass

    assert engine.closed is False
