import logging
from datetime import date as dt_date, datetime
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from typing import List, Optional, Dict, Any

from config import get_settings
from database import db, create_document, get_documents, get_document, update_document, delete_document
from schemas import Medication, Intake, Category
from scheduler import cycle_position, days_elapsed, resolve_due, schedule_index, week_half
from reminders import active_window, default_windows, pending_reminders, taken_flags

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Pill Reminder API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.get("/")
def read_root():
    return {"message": "Pill Reminder Backend Running"}

@app.get("/test")
def test_database():
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": "✅ Set" if settings.database_url else "❌ Not Set",
        "database_name": "✅ Set" if settings.database_name else "❌ Not Set",
        "connection_status": "Not Connected",
        "collections": [],
    }
    if db is None:
        return response
    response["database"] = "✅ Available"
    response["connection_status"] = "Connected"
    try:
        response["collections"] = db.list_collection_names()[:10]
        response["database"] = "✅ Connected & Working"
    except Exception as e:
        logger.warning("Database check failed: %s", e)
        response["database"] = f"⚠️  Connected but Error: {str(e)[:50]}"
    return response

# Helper models
class MedicationCreate(Medication):
    pass

class MedicationOut(Medication):
    id: str

class IntakeCreate(Intake):
    pass

class IntakeOut(Intake):
    id: str

def _with_id(doc: Dict[str, Any]) -> Dict[str, Any]:
    d = dict(doc)
    d["id"] = str(d.pop("_id"))
    return d

def _server_error(e: Exception) -> HTTPException:
    logger.exception("Request failed")
    return HTTPException(status_code=500, detail=str(e))

def _local_now() -> datetime:
    # one clock for intake dates and reminder lookups
    return datetime.now()

def _parse_day(value: str) -> dt_date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise HTTPException(status_code=422, detail="date must be YYYY-MM-DD")

def _active_medications(patient_id: Optional[str]) -> List[Dict[str, Any]]:
    filt: Dict[str, Any] = {"active": True}
    if patient_id:
        filt["patient_id"] = patient_id
    return get_documents("medication", filt)

# Medication Routes
@app.post("/api/medications", response_model=dict)
async def create_medication(payload: MedicationCreate):
    try:
        med_id = create_document("medication", payload)
        logger.info("Created medication %s (%s)", med_id, payload.name)
        return {"id": med_id}
    except Exception as e:
        raise _server_error(e)

@app.get("/api/medications", response_model=List[MedicationOut])
async def list_medications(patient_id: Optional[str] = None):
    try:
        filt: Dict[str, Any] = {}
        if patient_id:
            filt["patient_id"] = patient_id
        return [MedicationOut(**_with_id(d)) for d in get_documents("medication", filt)]
    except Exception as e:
        raise _server_error(e)

@app.get("/api/medications/{medication_id}", response_model=MedicationOut)
async def get_medication(medication_id: str):
    try:
        doc = get_document("medication", medication_id)
    except Exception as e:
        raise _server_error(e)
    if doc is None:
        raise HTTPException(status_code=404, detail="Medication not found")
    return MedicationOut(**_with_id(doc))

@app.put("/api/medications/{medication_id}", response_model=dict)
async def update_medication(medication_id: str, payload: MedicationCreate):
    try:
        found = update_document("medication", medication_id, payload)
    except Exception as e:
        raise _server_error(e)
    if not found:
        raise HTTPException(status_code=404, detail="Medication not found")
    return {"id": medication_id}

@app.delete("/api/medications/{medication_id}", response_model=dict)
async def delete_medication(medication_id: str):
    try:
        deleted = delete_document("medication", medication_id)
    except Exception as e:
        raise _server_error(e)
    if not deleted:
        raise HTTPException(status_code=404, detail="Medication not found")
    logger.info("Deleted medication %s", medication_id)
    return {"id": medication_id, "deleted": True}

# Intake Routes (append-only)
@app.post("/api/intakes", response_model=dict)
async def log_intake(payload: IntakeCreate):
    now = _local_now()
    doc = payload.model_dump()
    if not doc.get("taken_at"):
        doc["taken_at"] = now.astimezone().isoformat()
    if not doc.get("date"):
        doc["date"] = now.date().isoformat()
    else:
        doc["date"] = _parse_day(doc["date"]).isoformat()
    try:
        intake_id = create_document("intake", doc)
        return {"id": intake_id}
    except Exception as e:
        raise _server_error(e)

@app.get("/api/intakes", response_model=List[IntakeOut])
async def list_intakes(patient_id: Optional[str] = None, date: Optional[dt_date] = None, category: Optional[Category] = None):
    try:
        filt: Dict[str, Any] = {}
        if patient_id:
            filt["patient_id"] = patient_id
        if date:
            filt["date"] = date.isoformat()
        if category:
            filt["category"] = category
        return [IntakeOut(**_with_id(d)) for d in get_documents("intake", filt)]
    except Exception as e:
        raise _server_error(e)

# Schedule Routes
@app.get("/api/schedule/index")
async def get_schedule_index(date: Optional[dt_date] = None):
    target = date or _local_now().date()
    epoch = settings.schedule_epoch
    return {
        "date": target.isoformat(),
        "epoch": epoch.isoformat(),
        "days_elapsed": days_elapsed(target, epoch),
        "cycle_position": cycle_position(target, epoch),
        "week_half": week_half(target, epoch),
        "day_of_week": target.weekday(),
        "index": schedule_index(target, epoch),
    }

@app.get("/api/due", response_model=List[MedicationOut])
async def get_due(category: Category, date: Optional[dt_date] = None, patient_id: Optional[str] = None):
    try:
        meds = _active_medications(patient_id)
        due = resolve_due(meds, category, reference=date or _local_now(), epoch=settings.schedule_epoch)
        return [MedicationOut(**_with_id(d)) for d in due]
    except Exception as e:
        raise _server_error(e)

@app.get("/api/reminders")
async def get_reminders(at: Optional[datetime] = None, patient_id: Optional[str] = None):
    moment = at or _local_now()
    response: Dict[str, Any] = {"at": moment.isoformat(), "category": None, "dose_day": None, "taken": False, "items": []}
    found = active_window(moment, default_windows(settings))
    if found is None:
        return response
    category, dose_day = found
    response["category"] = category
    response["dose_day"] = dose_day.isoformat()
    try:
        filt: Dict[str, Any] = {"date": dose_day.isoformat()}
        if patient_id:
            filt["patient_id"] = patient_id
        flags = taken_flags(get_documents("intake", filt), dose_day)
        meds = _active_medications(patient_id)
        pending = pending_reminders(meds, category, flags, reference=dose_day, epoch=settings.schedule_epoch)
    except Exception as e:
        raise _server_error(e)
    response["taken"] = flags[category]
    response["items"] = [MedicationOut(**_with_id(d)).model_dump() for d in pending]
    return response

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
