from fastapi import Depends, FastAPI

from supermarket_chain.core.session import get_chain
from supermarket_chain.core.settings import configure_logging, get_settings
from supermarket_chain.domain.chain import SupermarketChain
from supermarket_chain.routers.dashboard_router import router as dashboard_router
from supermarket_chain.routers.import_router import router as import_router

settings = get_settings()
configure_logging(settings)

app = FastAPI(title=settings.app_name, debug=settings.debug)

@app.get("/")
def root(chain: SupermarketChain = Depends(get_chain)):
    return {"ok": True, "service": "supermarket-chain", "stores": len(chain)}

app.include_router(dashboard_router, prefix="/dashboard", tags=["dashboard"])
app.include_router(import_router, prefix="/import", tags=["import"])
