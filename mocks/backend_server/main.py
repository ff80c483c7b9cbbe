from fastapi import Body, FastAPI, HTTPException
from fastapi.responses import JSONResponse
from datetime import datetime, timezone
from pathlib import Path
import json
import uuid

app = FastAPI(title="Mock Hosted Backend", version="1.0.0")
DATA_DIR = Path(__file__).resolve().parent / "data"

TABLES: dict[str, list[dict]] = {}


def reset_tables() -> None:
    """Reload both tables from the JSON seed files"""
    for name in ("clients", "payments"):
        TABLES[name] = json.loads((DATA_DIR / f"{name}.json").read_text())


reset_tables()


def eq(value: str | None) -> str | None:
    return value[3:] if value and value.startswith("eq.") else value


def ordered(rows: list[dict], order: str | None) -> list[dict]:
    if not order:
        return rows
    field, _, direction = order.partition(".")
    return sorted(rows, key=lambda r: (r.get(field) is None, r.get(field) or ""), reverse=direction == "desc")


def with_count(client: dict, select: str) -> dict:
    if "payments(count)" not in select:
        return client
    count = sum(1 for p in TABLES["payments"] if p["client_id"] == client["id"])
    return {**client, "payments": [{"count": count}]}


def with_client(payment: dict, select: str) -> dict:
    if "clients:" not in select:
        return payment
    names = {c["id"]: c["name"] for c in TABLES["clients"]}
    joined = {"name": names[payment["client_id"]]} if payment["client_id"] in names else None
    return {**payment, "clients": joined}


def rejected(code: str, message: str, status_code: int = 409) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"code": code, "message": message, "details": None, "hint": None})


@app.get("/health")
def health(): return {"status": "ok"}


@app.get("/rest/v1/clients")
def get_clients(select: str = "*", is_active: str | None = None, order: str | None = None):
    rows = TABLES["clients"]
    if is_active is not None:
        wanted = eq(is_active) == "true"
        rows = [r for r in rows if r.get("is_active", True) == wanted]
    return JSONResponse(content=[with_count(r, select) for r in ordered(rows, order)])


@app.post("/rest/v1/clients", status_code=201)
def post_clients(rows: list[dict] = Body(...), select: str = "*"):
    created = []
    for row in rows:
        if row.get("name") is None or row.get("payment_day") is None:
            return rejected("23502", "null value in column violates not-null constraint", 400)
        created.append({
            "id": str(uuid.uuid4()),
            "is_active": True,
            "created_at": datetime.now(timezone.utc).isoformat(),
            **row,
        })
    TABLES["clients"].extend(created)
    return [with_count(c, select) for c in created]


@app.patch("/rest/v1/clients")
def patch_clients(changes: dict = Body(...), id: str | None = None, select: str = "*"):
    if any(changes.get(k, "") is None for k in ("name", "principal_amount", "payment_day")):
        return rejected("23502", "null value in column violates not-null constraint", 400)
    updated = []
    for row in TABLES["clients"]:
        if row["id"] == eq(id):
            row.update(changes)
            updated.append(with_count(row, select))
    return updated


@app.get("/rest/v1/payments")
def get_payments(select: str = "*", order: str | None = None):
    return JSONResponse(content=[with_client(p, select) for p in ordered(TABLES["payments"], order)])


@app.post("/rest/v1/payments", status_code=201)
def post_payments(rows: list[dict] = Body(...), select: str = "*"):
    client_ids = {c["id"] for c in TABLES["clients"]}
    created = []
    for row in rows:
        if row.get("client_id") not in client_ids:
            return rejected("23503", 'insert or update on table "payments" violates foreign key constraint "payments_client_id_fkey"')
        created.append({"id": str(uuid.uuid4()), **row})
    TABLES["payments"].extend(created)
    return [with_client(p, select) for p in created]


@app.patch("/rest/v1/payments")
def patch_payments(changes: dict = Body(...), id: str | None = None, select: str = "*"):
    updated = []
    for row in TABLES["payments"]:
        if row["id"] == eq(id):
            row.update(changes)
            updated.append(with_client(row, select))
    return updated


@app.delete("/rest/v1/payments")
def delete_payments(id: str | None = None, client_id: str | None = None):
    if id is None and client_id is None:
        raise HTTPException(status_code=400, detail="DELETE requires a filter")
    removed = [
        p for p in TABLES["payments"]
        if (id is None or p["id"] == eq(id)) and (client_id is None or p["client_id"] == eq(client_id))
    ]
    TABLES["payments"] = [p for p in TABLES["payments"] if p not in removed]
    return removed
