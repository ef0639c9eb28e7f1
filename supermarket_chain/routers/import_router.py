import logging
import uuid
from pathlib import Path

import pandas as pd
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import FileResponse

from supermarket_chain.core.session import ChainHolder, get_chain_holder
from supermarket_chain.core.settings import Settings, get_settings
from supermarket_chain.domain.errors import InventoryError
from supermarket_chain.services.loader import build_chain, validate_frames

logger = logging.getLogger(__name__)

router = APIRouter()


def read_csv(upload: UploadFile) -> pd.DataFrame:
    if not upload.filename.lower().endswith(".csv"):
        raise HTTPException(status_code=400, detail=f"{upload.filename} must be a CSV")
    try:
        return pd.read_csv(upload.file)
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"{upload.filename}: could not read CSV: {e}")


def read_uploads(stores, products, inventory, sales):
    frames = {
        "stores": read_csv(stores),
        "products": read_csv(products),
        "inventory": read_csv(inventory),
        "sales": read_csv(sales),
    }
    filenames = {
        "stores": stores.filename,
        "products": products.filename,
        "inventory": inventory.filename,
        "sales": sales.filename,
    }
    return frames, filenames


def write_error_report(errors: list[dict], settings: Settings) -> str:
    report_dir = Path(settings.error_report_dir)
    report_dir.mkdir(parents=True, exist_ok=True)
    report_id = uuid.uuid4().hex
    pd.DataFrame(errors).to_csv(report_dir / f"{report_id}.csv", index=False)
    return report_id


def summary(frames: dict[str, pd.DataFrame]) -> dict:
    return {f"{key}_rows": int(len(df)) for key, df in frames.items()}


@router.get("/error-report/{report_id}")
def download_error_report(report_id: str, settings: Settings = Depends(get_settings)):
    if not report_id.isalnum():
        raise HTTPException(status_code=404, detail="Error report not found")
    path = Path(settings.error_report_dir) / f"{report_id}.csv"
    if not path.exists():
        raise HTTPException(status_code=404, detail="Error report not found")
    return FileResponse(path, media_type="text/csv", filename="import_error_report.csv")


@router.post("/validate")
def validate_all(
    stores: UploadFile = File(...),
    products: UploadFile = File(...),
    inventory: UploadFile = File(...),
    sales: UploadFile = File(...),
    settings: Settings = Depends(get_settings),
):
    frames, filenames = read_uploads(stores, products, inventory, sales)
    errors = validate_frames(**frames, filenames=filenames)

    if errors:
        report_id = write_error_report(errors, settings)
        logger.warning("Import validation found %d errors (report %s)", len(errors), report_id)
        return {
            "ok": False,
            "summary": summary(frames),
            "errors_count": len(errors),
            "error_report_id": report_id,
            "error_report_url": f"/import/error-report/{report_id}",
            "errors_preview": errors[:settings.import_preview_limit],
        }

    return {
        "ok": True,
        "summary": summary(frames),
        "errors_count": 0,
        "errors_preview": [],
    }


@router.post("/commit")
def commit_import(
    stores: UploadFile = File(...),
    products: UploadFile = File(...),
    inventory: UploadFile = File(...),
    sales: UploadFile = File(...),
    holder: ChainHolder = Depends(get_chain_holder),
    settings: Settings = Depends(get_settings),
):
    frames, filenames = read_uploads(stores, products, inventory, sales)
    errors = validate_frames(**frames, filenames=filenames)
    if errors:
        logger.warning("Rejected import with %d validation errors", len(errors))
        raise HTTPException(
            status_code=400,
            detail={
                "message": "Validation failed. Run /import/validate for the full report.",
                "errors_count": len(errors),
                "errors_preview": errors[:settings.import_preview_limit],
            },
        )

    # The served chain is only replaced once the new one is fully built
    try:
        chain = build_chain(**frames)
    except (InventoryError, ValueError) as e:
        logger.warning("Rejected import: %s", e)
        raise HTTPException(status_code=409, detail=str(e))

    holder.swap(chain)
    return {
        "ok": True,
        "saved": {
            "supermarkets": len(chain),
            **summary(frames),
        },
        "revenue": chain.get_total_revenue(),
        "note": "The previous chain was replaced as a whole.",
    }
