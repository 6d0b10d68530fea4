import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from emtelemetry.routers import decode, ingest
from emtelemetry.settings import load_settings

settings = load_settings()
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="EM telemetry decoder")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(decode.router)
app.include_router(ingest.router)

@app.get("/health")
def health():
    return {"ok": True}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("emtelemetry.main:app", host="0.0.0.0", port=8000, reload=True)
