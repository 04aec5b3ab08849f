"""Run the astrolog API with uvicorn."""

import uvicorn

from astrolog.core.config import settings

if __name__ == "__main__":
    uvicorn.run("astrolog:app", host=settings.host, port=settings.port, reload=False)
