"""Course variant endpoints (admin writes)."""

from fastapi import APIRouter, status

from tichnuta.api.dependencies import AdminOnly, SiteStoreDep
from tichnuta.api.models import APIResponse, VariantResponse, VariantUpdate

router = APIRouter(prefix="/variants", tags=["variants"], dependencies=[AdminOnly])


@router.patch("/{variant_id}", response_model=APIResponse[VariantResponse])
def update_variant(
    variant_id: str, variant: VariantUpdate, store: SiteStoreDep
) -> APIResponse[VariantResponse]:
    """Update a variant (partial update)."""
    updated = store.update_variant(variant_id, **variant.model_dump(exclude_unset=True))
    return APIResponse(data=VariantResponse.model_validate(updated))


@router.delete("/{variant_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_variant(variant_id: str, store: SiteStoreDep) -> None:
    store.delete_variant(variant_id)
