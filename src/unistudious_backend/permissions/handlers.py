from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
from sqlalchemy.orm import Session, Query
from unistudious_backend.permissions.principal import Principal
from unistudious_backend.api.exceptions import ForbiddenException


class PermissionHandler(ABC):
    """Base class for entity-specific permission handlers"""

    def __init__(self, entity: type, resource_name: Optional[str] = None):
        self.entity = entity
        self.resource_name = resource_name or entity.__tablename__

    @abstractmethod
    def can_perform_action(self, principal: Principal, action: str, resource: Optional[Any] = None, context: Optional[Dict[str, str]] = None) -> bool:
        """Check if principal can perform an action.

        Args:
            principal: Current principal
            action: Action to perform (e.g., create, update)
            resource: The loaded record for record-level checks; None for the
                role-only check that precedes loading
            context: Identifiers from the payload (e.g., {"course_id": "..."})
        """
        pass

    @abstractmethod
    def build_query(self, principal: Principal, action: str, db: Session) -> Query:
        """Build a query already restricted to the records the principal may see"""
        pass

    def check_admin(self, principal: Principal) -> bool:
        """Check if principal has admin privileges"""
        return principal.is_admin

    def check_general_permission(self, principal: Principal, action: str) -> bool:
        """Check the role policy table for action on this resource"""
        return principal.permitted(self.resource_name, action)

    def forbidden(self, action: Optional[str] = None) -> ForbiddenException:
        detail = {"entity": self.resource_name}
        if action is not None:
            detail["action"] = action
        return ForbiddenException(detail=detail)


class PermissionRegistry:
    """Registry for managing entity permission handlers"""

    _instance = None
    _handlers: Dict[Any, PermissionHandler] = {}

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def register(self, key: Any, handler: PermissionHandler):
        """Register a permission handler for an entity or a named resource"""
        self._handlers[key] = handler

    def get_handler(self, key: Any) -> Optional[PermissionHandler]:
        """Get the permission handler for an entity or a named resource"""
        return self._handlers.get(key)

    def check_permissions(self, principal: Principal, entity: Any, action: str, db: Session) -> Query:
        """Check permissions and return filtered query"""
        handler = self.get_handler(entity)
        if not handler:
            # Fallback to admin-only if no handler registered
            if not principal.is_admin:
                raise ForbiddenException(detail={"entity": entity.__tablename__})
            return db.query(entity)

        return handler.build_query(principal, action, db)

    def authorize(self, principal: Principal, entity: Any, action: str, resource: Optional[Any] = None, context: Optional[Dict[str, str]] = None):
        """Raise Forbidden unless the handler allows the action"""
        handler = self.get_handler(entity)
        if not handler:
            if not principal.is_admin:
                raise ForbiddenException(detail={"entity": getattr(entity, "__tablename__", str(entity))})
            return

        if not handler.can_perform_action(principal, action, resource, context):
            raise handler.forbidden(action)


# Global registry instance
permission_registry = PermissionRegistry()
