"""
Expense Parser API
Text / screenshot / notification in, structured expense out.
"""

import logging
import traceback
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import FastAPI, File, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from expense_parser.config import PipelineConfig
from expense_parser.exceptions import NoTextFoundError
from expense_parser.extractor.pipeline import ExpensePipeline
from expense_parser.extractor.sms_timestamp import matches_sms_format, parse_sms_timestamp
from expense_parser.preprocessing.notification_filters import (
    is_financial_app,
    is_financial_notification,
    notification_text,
    should_process_notification,
)
from expense_parser.preprocessing.sms_amount import extract_sms_amount
from expense_parser.schemas import (
    NotificationCheckRequest,
    NotificationCheckResponse,
    ObservationRequest,
    ParsedExpense,
    ParseRequest,
    ParseResponse,
    ProcessResponse,
    RawObservation,
)
from expense_parser.utils.ocr_runner import configure_tesseract, image_to_observation

logger = logging.getLogger("uvicorn")


def create_app(config: Optional[PipelineConfig] = None,
               pipeline: Optional[ExpensePipeline] = None) -> FastAPI:
    config = config or PipelineConfig.from_env()
    pipeline = pipeline or ExpensePipeline(config)
    configure_tesseract(config.tesseract_cmd)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        pipeline.close()

    app = FastAPI(title="Expense Parser API", version="1.0.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.config = config
    app.state.pipeline = pipeline

    @app.exception_handler(Exception)
    async def unhandled_exception(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=True)
        body = {"success": False, "message": f"Internal server error: {exc}"}
        if config.debug_trace:
            body["traceback"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return JSONResponse(status_code=500, content=body)

    @app.get("/health")
    def health():
        return {"status": "ok", "timestamp": datetime.now().isoformat()}

    @app.post("/api/ocr/parse", response_model=ParseResponse)
    def parse_text(payload: ParseRequest):
        if not payload.text or not payload.text.strip():
            raise HTTPException(status_code=400, detail="Text field is required")

        record = pipeline.process_text(payload.text)
        return ParseResponse(
            success=True,
            data=ParsedExpense(
                amount=record.amount,
                merchant=record.merchant,
                type=record.direction,
                confidence=record.confidence,
                category=record.category,
            ),
        )

    @app.post("/api/v1/expense/process", response_model=ProcessResponse)
    def process_observation(payload: ObservationRequest):
        observation = RawObservation(**payload.model_dump())
        try:
            record = pipeline.process(observation)
        except NoTextFoundError as e:
            return ProcessResponse(success=False, error=str(e))
        return ProcessResponse(success=True, data=record)

    @app.post("/api/v1/expense/screenshot", response_model=ProcessResponse)
    def process_screenshot(file: UploadFile = File(...)):
        content = file.file.read()
        if not content:
            raise HTTPException(status_code=400, detail="Empty upload")
        try:
            observation = image_to_observation(content, source="screenshot")
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except RuntimeError as e:
            logger.error(f"OCR unavailable: {e}")
            raise HTTPException(status_code=503, detail=str(e))

        try:
            record = pipeline.process(observation)
        except NoTextFoundError as e:
            return ProcessResponse(success=False, error=str(e))
        return ProcessResponse(success=True, data=record)

    @app.post("/api/v1/notifications/check", response_model=NotificationCheckResponse)
    def check_notification(payload: NotificationCheckRequest):
        text = notification_text(payload.text, payload.big_text)
        return NotificationCheckResponse(
            is_financial_app=is_financial_app(payload.package_name),
            is_financial_notification=is_financial_notification(payload.title, text),
            matches_sms_format=matches_sms_format(text),
            should_process=should_process_notification(
                payload.package_name, payload.title, text, selected_apps=config.selected_apps
            ),
            sms_timestamp=parse_sms_timestamp(text),
            sms_amount=extract_sms_amount(text),
        )

    return app


app = create_app()
