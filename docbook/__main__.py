import uvicorn

from docbook.core.config import settings

if __name__ == "__main__":
    uvicorn.run("docbook.main:app", host="0.0.0.0", port=settings.port, reload=not settings.is_production)
