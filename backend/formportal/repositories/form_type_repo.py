"""Form Type Repository - Read access to form type configuration"""
from typing import Optional
from pymongo.collection import Collection

from .mongo_client import get_collection, FORM_TYPES
from ..domain.models import FormType
from ..domain.errors import FormTypeNotFoundError
from ..utils.logger import get_logger

logger = get_logger(__name__)


class FormTypeRepository:
    """Repository for form types and their required approvals"""

    def __init__(self, form_types: Optional[Collection] = None):
        self._form_types: Collection = form_types if form_types is not None else get_collection(FORM_TYPES)

    def get_form_type(self, form_type_id: str) -> Optional[FormType]:
        doc = self._form_types.find_one({"form_type_id": form_type_id})
        if doc:
            doc.pop("_id", None)
            return FormType.model_validate(doc)
        return None

    def get_active_or_raise(self, form_type_id: str) -> FormType:
        """Get an active form type or raise error"""
        form_type = self.get_form_type(form_type_id)
        if not form_type or not form_type.is_active:
            raise FormTypeNotFoundError(f"Form type {form_type_id} not found")
        return form_type

    def upsert_form_type(self, form_type: FormType) -> FormType:
        """Insert or replace a form type (used by seeding scripts)"""
        doc = form_type.model_dump()
        self._form_types.replace_one(
            {"form_type_id": form_type.form_type_id},
            {**doc, "_id": form_type.form_type_id},
            upsert=True
        )
        logger.info(f"Upserted form type {form_type.form_type_id}")
        return form_type
