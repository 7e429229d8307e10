# backend/wedding_app/db/sqlite_store.py

import sqlite3
import json
import time
from pathlib import Path
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List, Iterable, Sequence
from uuid import uuid4

from wedding_app.core.config_loader import settings
from wedding_app.core.errors import DataStoreUnavailableError
from wedding_app.core.logger import logger
from wedding_app.models.listing_models import (
    Category,
    CategoryRole,
    PricePlan,
    PriceWindow,
    UnitKind,
    VendorProfile,
)
from wedding_app.utils.categories import category_seed_rows


# Retry configuration
MAX_RETRIES = 5
RETRY_DELAY = 0.1  # 100ms

_PROFILE_SELECT = """
SELECT p.*, v.name AS vendor_name,
       (SELECT json_group_array(pc.category_id)
          FROM profile_categories pc
         WHERE pc.profile_id = p.id) AS category_ids_json
  FROM vendor_profiles p
  JOIN vendors v ON v.id = p.vendor_id
 WHERE v.status = 'approved'
"""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _area_clause(area_ids: Iterable[str]):
    ids = sorted(set(area_ids))
    placeholders = ",".join("?" for _ in ids)
    clause = (
        "EXISTS (SELECT 1 FROM json_each(p.areas_json) "
        f"WHERE json_each.value IN ({placeholders}))"
    )
    return clause, ids


def _price_clause(window: PriceWindow):
    clause = (
        "(p.price_min <= ? OR p.price_max >= ? "
        "OR (p.price_min IS NULL AND p.price_max IS NULL))"
    )
    return clause, [window.upper, window.lower]


class SQLiteStore:
    """
    Vendor listing store (read side used by Wedding Genie) plus saved plans.
    Every sqlite3 failure leaves this class as DataStoreUnavailableError.
    """

    def __init__(self, db_path: Optional[str] = None):
        path = db_path or settings.DB_PATH
        if path != ":memory:":
            Path(path).resolve().parent.mkdir(parents=True, exist_ok=True)
        try:
            self.conn = sqlite3.connect(
                path,
                check_same_thread=False,
                timeout=30.0
            )
            self.conn.row_factory = sqlite3.Row
            self.conn.execute("PRAGMA journal_mode=WAL")
            self.conn.execute("PRAGMA synchronous=NORMAL")
            self.conn.execute("PRAGMA busy_timeout=30000")
            self.conn.execute("PRAGMA foreign_keys=ON")
        except sqlite3.Error as e:
            logger.error(f"Cannot open listing store at {path}: {e}")
            raise DataStoreUnavailableError(f"cannot open listing store: {e}") from e

        self._execute_with_retry(self._init_tables)
        self._execute_with_retry(self._seed_categories)

    def close(self):
        self.conn.close()

    def _execute_with_retry(self, operation, *args, **kwargs):
        """Retry while the database is locked, then surface as DataStoreUnavailableError."""
        for attempt in range(MAX_RETRIES):
            try:
                return operation(*args, **kwargs)
            except sqlite3.OperationalError as e:
                if "locked" in str(e).lower() and attempt < MAX_RETRIES - 1:
                    time.sleep(RETRY_DELAY * (attempt + 1))
                    continue
                logger.error(f"Listing store operation failed: {e}")
                raise DataStoreUnavailableError(str(e)) from e
            except sqlite3.Error as e:
                logger.error(f"Listing store operation failed: {e}")
                raise DataStoreUnavailableError(str(e)) from e

    def _fetch_all(self, sql: str, params: Sequence[Any] = ()) -> List[sqlite3.Row]:
        def _query():
            cur = self.conn.cursor()
            cur.execute(sql, list(params))
            return cur.fetchall()

        return self._execute_with_retry(_query)

    # ----------------------------------------------------------------------
    # CREATE TABLES
    # ----------------------------------------------------------------------
    def _init_tables(self):
        cur = self.conn.cursor()

        cur.execute("""
        CREATE TABLE IF NOT EXISTS categories (
            id TEXT PRIMARY KEY,
            name TEXT UNIQUE NOT NULL,
            display_order INTEGER DEFAULT 0,
            role TEXT NOT NULL DEFAULT 'normal',
            unit_kind TEXT NOT NULL DEFAULT 'per_item'
        );
        """)

        cur.execute("""
        CREATE TABLE IF NOT EXISTS vendors (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            status TEXT NOT NULL DEFAULT 'pending',
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );
        """)

        cur.execute("""
        CREATE TABLE IF NOT EXISTS vendor_profiles (
            id TEXT PRIMARY KEY,
            vendor_id TEXT NOT NULL,
            name TEXT,
            category_type TEXT,
            areas_json TEXT NOT NULL DEFAULT '[]',
            price_min REAL,
            price_max REAL,
            max_guests INTEGER,
            plans_json TEXT NOT NULL DEFAULT '[]',
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY (vendor_id) REFERENCES vendors(id) ON DELETE CASCADE
        );
        """)

        cur.execute("""
        CREATE TABLE IF NOT EXISTS profile_categories (
            profile_id TEXT NOT NULL,
            category_id TEXT NOT NULL,
            PRIMARY KEY (profile_id, category_id),
            FOREIGN KEY (profile_id) REFERENCES vendor_profiles(id) ON DELETE CASCADE,
            FOREIGN KEY (category_id) REFERENCES categories(id) ON DELETE CASCADE
        );
        """)

        # SAVED GENIE PLANS (input + result stored verbatim)
        cur.execute("""
        CREATE TABLE IF NOT EXISTS genie_plans (
            id TEXT PRIMARY KEY,
            couple_id TEXT NOT NULL,
            plan_name TEXT,
            input_snapshot_json TEXT NOT NULL,
            plan_data_json TEXT NOT NULL,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );
        """)

        cur.execute("CREATE INDEX IF NOT EXISTS idx_profile_vendor ON vendor_profiles(vendor_id);")
        cur.execute("CREATE INDEX IF NOT EXISTS idx_pc_category ON profile_categories(category_id);")
        cur.execute("CREATE INDEX IF NOT EXISTS idx_plans_couple ON genie_plans(couple_id);")

        self.conn.commit()

    def _seed_categories(self):
        cur = self.conn.cursor()
        for name, display_order, role, unit_kind in category_seed_rows():
            cur.execute("""
            INSERT OR IGNORE INTO categories (id, name, display_order, role, unit_kind)
            VALUES (?, ?, ?, ?, ?)
            """, (uuid4().hex, name, display_order, role, unit_kind))
        self.conn.commit()

    # ----------------------------------------------------------------------
    # ROW MAPPING
    # ----------------------------------------------------------------------
    @staticmethod
    def _row_to_category(row: sqlite3.Row) -> Category:
        return Category(
            id=row["id"],
            name=row["name"],
            display_order=row["display_order"],
            role=CategoryRole(row["role"]),
            unit_kind=UnitKind(row["unit_kind"]),
        )

    @staticmethod
    def _row_to_profile(row: sqlite3.Row) -> VendorProfile:
        return VendorProfile(
            id=row["id"],
            vendor_id=row["vendor_id"],
            vendor_name=row["vendor_name"],
            name=row["name"],
            category_type=row["category_type"],
            category_ids=json.loads(row["category_ids_json"] or "[]"),
            areas=json.loads(row["areas_json"] or "[]"),
            price_min=row["price_min"],
            price_max=row["price_max"],
            max_guests=row["max_guests"],
            plans=[PricePlan(**p) for p in json.loads(row["plans_json"] or "[]")],
        )

    # ----------------------------------------------------------------------
    # CATEGORIES
    # ----------------------------------------------------------------------
    def list_categories(self, excluding: Optional[Iterable[str]] = None) -> List[Category]:
        excluded = set(excluding or [])
        rows = self._fetch_all("SELECT * FROM categories ORDER BY display_order, name")
        return [self._row_to_category(r) for r in rows if r["name"] not in excluded]

    def get_category_by_role(self, role: CategoryRole) -> Optional[Category]:
        rows = self._fetch_all(
            "SELECT * FROM categories WHERE role = ? ORDER BY display_order LIMIT 1",
            (role.value,),
        )
        return self._row_to_category(rows[0]) if rows else None

    # ----------------------------------------------------------------------
    # VENDORS / PROFILES (write side)
    # ----------------------------------------------------------------------
    def create_vendor(self, name: str, status: str = "approved") -> str:
        vendor_id = uuid4().hex

        def _create_vendor():
            self.conn.execute(
                "INSERT INTO vendors (id, name, status) VALUES (?, ?, ?)",
                (vendor_id, name, status),
            )
            self.conn.commit()

        self._execute_with_retry(_create_vendor)
        return vendor_id

    def create_profile(
        self,
        vendor_id: str,
        *,
        name: Optional[str] = None,
        category_ids: Iterable[str] = (),
        areas: Iterable[str] = (),
        price_min: Optional[float] = None,
        price_max: Optional[float] = None,
        max_guests: Optional[int] = None,
        plans: Optional[List[Dict[str, Any]]] = None,
        category_type: Optional[str] = None,
    ) -> str:
        profile_id = uuid4().hex

        def _create_profile():
            cur = self.conn.cursor()
            cur.execute("""
            INSERT INTO vendor_profiles (id, vendor_id, name, category_type, areas_json,
                                         price_min, price_max, max_guests, plans_json)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                profile_id, vendor_id, name, category_type,
                json.dumps(list(areas), ensure_ascii=False),
                price_min, price_max, max_guests,
                json.dumps(plans or [], ensure_ascii=False),
            ))
            cur.executemany(
                "INSERT INTO profile_categories (profile_id, category_id) VALUES (?, ?)",
                [(profile_id, cid) for cid in category_ids],
            )
            self.conn.commit()

        self._execute_with_retry(_create_profile)
        return profile_id

    # ----------------------------------------------------------------------
    # LISTING QUERIES (read side)
    # ----------------------------------------------------------------------
    def find_approved_venue_profiles(self, area_ids: Iterable[str], min_capacity: int) -> List[VendorProfile]:
        area_sql, area_params = _area_clause(area_ids)
        sql = _PROFILE_SELECT + f"""
           AND p.category_type = 'venue'
           AND p.max_guests >= ?
           AND EXISTS (SELECT 1 FROM profile_categories pc
                         JOIN categories c ON c.id = pc.category_id
                        WHERE pc.profile_id = p.id AND c.role = ?)
           AND {area_sql}
         ORDER BY p.rowid
        """
        rows = self._fetch_all(sql, [min_capacity, CategoryRole.VENUE.value, *area_params])
        return [self._row_to_profile(r) for r in rows]

    def find_approved_profiles_by_category(
        self,
        category_id: str,
        area_ids: Optional[Iterable[str]] = None,
        price_window: Optional[PriceWindow] = None,
        order_by_price: bool = False,
        limit: Optional[int] = None,
    ) -> List[VendorProfile]:
        clauses = ["EXISTS (SELECT 1 FROM profile_categories pc WHERE pc.profile_id = p.id AND pc.category_id = ?)"]
        params: List[Any] = [category_id]

        if area_ids is not None:
            area_sql, area_params = _area_clause(area_ids)
            clauses.append(area_sql)
            params.extend(area_params)

        if price_window is not None:
            price_sql, price_params = _price_clause(price_window)
            clauses.append(price_sql)
            params.extend(price_params)

        sql = _PROFILE_SELECT + "".join(f" AND {c}" for c in clauses)
        if order_by_price:
            # nulls last, then insertion order
            sql += " ORDER BY p.price_min IS NULL, p.price_min, p.rowid"
        else:
            sql += " ORDER BY p.rowid"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)

        rows = self._fetch_all(sql, params)
        return [self._row_to_profile(r) for r in rows]

    def find_approved_profiles_for_categories(self, category_ids: Iterable[str]) -> List[VendorProfile]:
        ids = list(dict.fromkeys(category_ids))
        if not ids:
            return []
        placeholders = ",".join("?" for _ in ids)
        sql = _PROFILE_SELECT + f"""
           AND EXISTS (SELECT 1 FROM profile_categories pc
                        WHERE pc.profile_id = p.id AND pc.category_id IN ({placeholders}))
         ORDER BY p.rowid
        """
        rows = self._fetch_all(sql, ids)
        return [self._row_to_profile(r) for r in rows]

    # ----------------------------------------------------------------------
    # SAVED GENIE PLANS
    # ----------------------------------------------------------------------
    @staticmethod
    def _row_to_plan(row: sqlite3.Row) -> Dict[str, Any]:
        return {
            "id": row["id"],
            "couple_id": row["couple_id"],
            "plan_name": row["plan_name"],
            "input_snapshot": json.loads(row["input_snapshot_json"]),
            "plan_data": json.loads(row["plan_data_json"]),
            "created_at": row["created_at"],
            "updated_at": row["updated_at"],
        }

    def save_genie_plan(
        self, couple_id: str, plan_name: Optional[str],
        input_snapshot: Dict[str, Any], plan_data: Dict[str, Any]
    ) -> str:
        plan_id = uuid4().hex

        def _save_plan():
            now = _now()
            self.conn.execute("""
            INSERT INTO genie_plans (id, couple_id, plan_name, input_snapshot_json,
                                     plan_data_json, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """, (
                plan_id, couple_id, plan_name,
                json.dumps(input_snapshot, ensure_ascii=False),
                json.dumps(plan_data, ensure_ascii=False),
                now, now,
            ))
            self.conn.commit()

        self._execute_with_retry(_save_plan)
        return plan_id

    def list_genie_plans(self, couple_id: str) -> List[Dict[str, Any]]:
        rows = self._fetch_all(
            "SELECT * FROM genie_plans WHERE couple_id = ? ORDER BY created_at DESC, rowid DESC",
            (couple_id,),
        )
        return [self._row_to_plan(r) for r in rows]

    def get_genie_plan(self, plan_id: str, couple_id: str) -> Optional[Dict[str, Any]]:
        rows = self._fetch_all(
            "SELECT * FROM genie_plans WHERE id = ? AND couple_id = ?",
            (plan_id, couple_id),
        )
        return self._row_to_plan(rows[0]) if rows else None

    def update_genie_plan(
        self, plan_id: str, couple_id: str,
        plan_name: Optional[str] = None, plan_data: Optional[Dict[str, Any]] = None
    ) -> bool:
        assignments = ["updated_at = ?"]
        params: List[Any] = [_now()]
        if plan_name is not None:
            assignments.append("plan_name = ?")
            params.append(plan_name)
        if plan_data is not None:
            assignments.append("plan_data_json = ?")
            params.append(json.dumps(plan_data, ensure_ascii=False))
        params.extend([plan_id, couple_id])

        def _update_plan():
            cur = self.conn.cursor()
            cur.execute(
                f"UPDATE genie_plans SET {', '.join(assignments)} WHERE id = ? AND couple_id = ?",
                params,
            )
            self.conn.commit()
            return cur.rowcount > 0

        return self._execute_with_retry(_update_plan)

    def delete_genie_plan(self, plan_id: str, couple_id: str) -> bool:
        def _delete_plan():
            cur = self.conn.cursor()
            cur.execute(
                "DELETE FROM genie_plans WHERE id = ? AND couple_id = ?",
                (plan_id, couple_id),
            )
            self.conn.commit()
            return cur.rowcount > 0

        return self._execute_with_retry(_delete_plan)
