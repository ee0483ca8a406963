from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from feeledger.api.v1.admissions.router import router as admissions_router
from feeledger.api.v1.fees.router import router as fees_router
from feeledger.core.logging import configure_logging


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(title="Fee Ledger")

    # CORS: allow the back-office frontend to call this API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(admissions_router)
    app.include_router(fees_router)

    return app


app = create_app()
