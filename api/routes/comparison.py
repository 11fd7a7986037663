"""
Comparison routes for the TreeDiff API.

Provides value comparison, file comparison and JSON validation.
"""
from fastapi import APIRouter, UploadFile, File, HTTPException
import logging

from config import settings
from diffcore import compare, validate_json, format_json, parse_json_content
from api.schemas import (
    ComparisonRequest,
    ComparisonResponse,
    DiffOptionsSchema,
    ValidationRequest,
    ValidationResponse,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def _run_compare(old_value, new_value, options: DiffOptionsSchema = None):
    # DiffConfigError propagates to the app-level handler as a 400
    defaults = settings.diff_options()
    diff_options = options.to_options(defaults) if options else defaults
    return compare(old_value, new_value, diff_options)


@router.post("/compare", response_model=ComparisonResponse, response_model_exclude_unset=True)
async def compare_values(request: ComparisonRequest):
    """
    Compare two values and return the diff tree.
    """
    result = _run_compare(request.old_value, request.new_value, request.options)
    return ComparisonResponse.from_result(result)


@router.post("/compare/files", response_model=ComparisonResponse, response_model_exclude_unset=True)
async def compare_files(
    before_file: UploadFile = File(...),
    after_file: UploadFile = File(...),
):
    """
    Compare two uploaded JSON files.
    """
    # Validate file types
    if not before_file.filename.lower().endswith('.json'):
        raise HTTPException(status_code=400, detail="Before file must be JSON")
    if not after_file.filename.lower().endswith('.json'):
        raise HTTPException(status_code=400, detail="After file must be JSON")

    documents = []
    for label, upload in (("before", before_file), ("after", after_file)):
        content = await upload.read()
        try:
            text = content.decode('utf-8')
        except UnicodeDecodeError:
            raise HTTPException(status_code=400, detail=f"{label.capitalize()} file is not UTF-8")
        parsed = parse_json_content(text, upload.filename)
        if parsed is None:
            raise HTTPException(status_code=400, detail=f"Invalid JSON in {label} file")
        documents.append(parsed)

    before, after = documents
    result = _run_compare(before.value, after.value)
    logger.info(
        f"Compared {before.filename} vs {after.filename}: "
        f"{result.stats.added} added, {result.stats.deleted} deleted, {result.stats.modified} modified"
    )

    return ComparisonResponse.from_result(
        result,
        before_file=before.filename,
        after_file=after.filename,
    )


@router.post("/validate", response_model=ValidationResponse, response_model_exclude_none=True)
async def validate_document(request: ValidationRequest):
    """
    Validate JSON text and return a formatted copy when it is valid.
    """
    validation = validate_json(request.text)
    response = ValidationResponse(**validation.to_dict())
    if validation.is_valid and request.text.strip():
        response.formatted = format_json(request.text, indent=request.indent)
    return response
