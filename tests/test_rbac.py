"""Unit tests for app.core.rbac: policy evaluation and permission catalogue."""

import unittest

from app.core.rbac import (
    ADMIN_ONLY,
    MATERIAL_CREATE_POLICY,
    STOCK_CREATE_POLICY,
    STOCK_DELETE_POLICY,
    RoutePolicy,
    UserRole,
    is_authorized,
    validate_permissions,
)


class TestIsAuthorized(unittest.TestCase):
    def test_empty_policy_allows_everyone(self) -> None:
        self.assertTrue(is_authorized(RoutePolicy(), "VIEWER"))

    def test_role_only_policy(self) -> None:
        self.assertTrue(is_authorized(ADMIN_ONLY, "ADMIN"))
        self.assertFalse(is_authorized(ADMIN_ONLY, "WAREHOUSE_WORKER"))
        self.assertFalse(is_authorized(ADMIN_ONLY, "VIEWER"))

    def test_multiple_roles(self) -> None:
        self.assertTrue(is_authorized(STOCK_CREATE_POLICY, "WAREHOUSE_WORKER", ["stock.create"]))
        self.assertTrue(is_authorized(STOCK_CREATE_POLICY, "ADMIN", ["stock.create"]))
        self.assertFalse(is_authorized(STOCK_CREATE_POLICY, "VIEWER", ["stock.create"]))

    def test_role_match_without_permission_is_denied(self) -> None:
        self.assertFalse(is_authorized(STOCK_DELETE_POLICY, "ADMIN", ["stock.create", "stock.update"]))

    def test_all_required_permissions_must_be_held(self) -> None:
        policy = RoutePolicy.of(permissions=["stock.update", "stock.delete"])
        self.assertFalse(is_authorized(policy, "ADMIN", ["stock.update"]))
        self.assertTrue(is_authorized(policy, "VIEWER", ["stock.update", "stock.delete", "x"]))

    def test_permission_without_role_is_denied(self) -> None:
        self.assertFalse(is_authorized(MATERIAL_CREATE_POLICY, "VIEWER", ["material.create"]))

    def test_policy_accepts_role_enum_members(self) -> None:
        policy = RoutePolicy.of(roles=[UserRole.WAREHOUSE_WORKER])
        self.assertEqual(policy.required_roles, frozenset({UserRole.WAREHOUSE_WORKER}))
        self.assertEqual(policy.required_permissions, frozenset())


class TestValidatePermissions(unittest.TestCase):
    def test_sorts_and_deduplicates(self) -> None:
        self.assertEqual(
            validate_permissions(["stock.delete", "material.create", "stock.delete"]),
            ["material.create", "stock.delete"],
        )

    def test_unknown_permission_raises(self) -> None:
        with self.assertRaises(ValueError) as ctx:
            validate_permissions(["material.create", "warehouse.burn"])
        self.assertIn("warehouse.burn", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
