from __future__ import annotations

from fastapi import APIRouter, Depends

from storefront.services.settings_provider import SettingsProvider

from .common import SettingsResponse, get_settings_provider, run_blocking

router = APIRouter()


@router.get("/settings", response_model=SettingsResponse)
async def get_store_settings(
    settings_provider: SettingsProvider = Depends(get_settings_provider),
):
    """Public store settings used by the cart and checkout UI."""
    settings = await run_blocking(settings_provider.get_settings)
    return SettingsResponse(
        store_name=settings.store_name,
        currency=settings.currency,
        whatsapp_number=settings.whatsapp_number,
        delivery_charge=settings.delivery_charge,
        free_delivery_threshold=settings.free_delivery_threshold,
        discount_150_threshold=settings.discount_150_threshold,
        discount_200_threshold=settings.discount_200_threshold,
    )
