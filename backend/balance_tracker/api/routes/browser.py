"""Browser diagnostics endpoints."""
from fastapi import APIRouter
from fastapi.responses import JSONResponse
from balance_tracker.services.browser import check_browser
from balance_tracker.utils.errors import ExtractionError

router = APIRouter()


@router.get("/check")
async def browser_check():
    """Launch the browser, open a known page and report its title."""
    try:
        title = await check_browser()
    except ExtractionError as e:
        print(f"[BROWSER] Error launching browser: {e}")
        return JSONResponse(status_code=500, content={"success": False, "error": str(e)})
    
    return {
        "success": True,
        "message": "Browser engine is working",
        "pageTitle": title
    }
