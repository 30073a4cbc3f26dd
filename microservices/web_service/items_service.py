"""
Items Business Logic

List/add/edit/delete rows of the items table and dispatch of the CRUD
page's form actions.
"""

from typing import List, Mapping, Optional
import logging

from core.hosted import HostedServiceError

from .models import ActionResult, Item, ItemActionType, ItemForm
from .protocols import FormValidationError, InvalidActionError, ServiceHandleProtocol

logger = logging.getLogger(__name__)


class ItemsService:
    """Items CRUD through a request-bound service handle"""

    def __init__(self, handle: ServiceHandleProtocol, table: str = "items"):
        self.handle = handle
        self.table = table

    # Item Operations

    async def list_items(self) -> List[Item]:
        response = await self.handle.table(self.table).select("*").order("id").execute()
        return [Item.model_validate(row) for row in response.data]

    async def add_item(self, name: str, description: str) -> List[Item]:
        self._validate_fields(name, description)
        response = await self.handle.table(self.table).insert(
            {"name": name, "description": description}
        ).execute()
        logger.info(f"Item added: {name}")
        return [Item.model_validate(row) for row in response.data]

    async def edit_item(self, item_id: str, name: str, description: str) -> List[Item]:
        if not item_id:
            raise FormValidationError("Item id is required")
        self._validate_fields(name, description)
        response = await self.handle.table(self.table).update(
            {"name": name, "description": description}
        ).eq("id", item_id).execute()
        logger.info(f"Item updated: {item_id}")
        return [Item.model_validate(row) for row in response.data]

    async def delete_item(self, item_id: str) -> List[Item]:
        if not item_id:
            raise FormValidationError("Item id is required")
        response = await self.handle.table(self.table).delete().eq("id", item_id).execute()
        logger.info(f"Item deleted: {item_id}")
        return [Item.model_validate(row) for row in response.data]

    # Form Actions

    async def handle_action(self, form_data: Mapping[str, str]) -> ActionResult:
        """
        Run the action named by the form's actionType field.

        Returns:
            ActionResult with affected rows, or the error to show the user
        """
        form = ItemForm.model_validate(dict(form_data))
        try:
            items = await self._dispatch(form)
            return ActionResult(data=[item.model_dump() for item in items])
        except (InvalidActionError, FormValidationError) as e:
            return ActionResult(error=e.message)
        except HostedServiceError as e:
            logger.warning(f"Item action {form.action_type} failed: {e.message}")
            return ActionResult(error=e.message)
        except Exception as e:
            logger.error(f"Item action {form.action_type} failed: {e}", exc_info=True)
            return ActionResult(error="An error occurred")

    async def _dispatch(self, form: ItemForm) -> List[Item]:
        try:
            action = ItemActionType(form.action_type)
        except ValueError:
            raise InvalidActionError("Invalid action type")

        if action == ItemActionType.ADD:
            return await self.add_item(form.name or "", form.description or "")
        if action == ItemActionType.EDIT:
            return await self.edit_item(form.id or "", form.name or "", form.description or "")
        return await self.delete_item(form.id or "")

    @staticmethod
    def _validate_fields(name: str, description: str) -> None:
        if not name or not name.strip():
            raise FormValidationError("Name is required")
        if not description or not description.strip():
            raise FormValidationError("Description is required")

    @staticmethod
    def find_item(items: List[Item], item_id: Optional[str]) -> Optional[Item]:
        if not item_id:
            return None
        return next((item for item in items if str(item.id) == str(item_id)), None)
