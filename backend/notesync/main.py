from fastapi import FastAPI

from notesync.api import documents

app = FastAPI(title="Notes Document Store API")
app.include_router(documents.router)

@app.get("/health")
def health():
    return {"ok": True}
