"""Snowflake database service."""
import json
import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Generator, Optional

import snowflake.connector
from snowflake.connector import SnowflakeConnection
from snowflake.connector.cursor import SnowflakeCursor

from app.config import get_settings

logger = logging.getLogger(__name__)

# Workshop columns stored as VARIANT
WORKSHOP_JSON_COLUMNS = (
    "research_app_data",
    "cognition_two_data",
    "survey",
    "readiness_scores",
    "challenge_results",
    "validation_results",
    "prioritization_matrix",
    "workflow_maps",
    "data_lineage",
    "synthesis",
)
WORKSHOP_SCALAR_COLUMNS = (
    "company_name",
    "industry",
    "facilitator_name",
    "status",
    "research_app_report_id",
    "cognition_two_analysis_id",
)


def _loads(value: Any) -> Any:
    """VARIANT columns come back as JSON text."""
    if isinstance(value, str):
        return json.loads(value)
    return value


def _dumps(value: Any) -> Optional[str]:
    if value is None:
        return None
    return json.dumps(value, default=str)


class SnowflakeService:
    """Service for Snowflake database operations."""

    def __init__(self):
        self.settings = get_settings()
        self._connection: Optional[SnowflakeConnection] = None

    def _get_connection_params(self) -> dict[str, Any]:
        """Get connection parameters."""
        return {
            "account": self.settings.snowflake_account,
            "user": self.settings.snowflake_user,
            "password": self.settings.snowflake_password,
            "database": self.settings.snowflake_database,
            "schema": self.settings.snowflake_schema,
            "warehouse": self.settings.snowflake_warehouse,
        }

    def connect(self) -> SnowflakeConnection:
        """Establish connection to Snowflake."""
        if self._connection is None or self._connection.is_closed():
            self._connection = snowflake.connector.connect(
                **self._get_connection_params()
            )
        return self._connection

    def disconnect(self) -> None:
        """Close the Snowflake connection."""
        if self._connection and not self._connection.is_closed():
            self._connection.close()
            self._connection = None

    @contextmanager
    def cursor(self) -> Generator[SnowflakeCursor, None, None]:
        """Context manager for database cursor."""
        conn = self.connect()
        cur = conn.cursor()
        try:
            yield cur
            conn.commit()
        except Exception as e:
            conn.rollback()
            logger.error(f"Database error: {e}")
            raise
        finally:
            cur.close()

    async def health_check(self) -> tuple[bool, Optional[str]]:
        """Check if Snowflake connection is healthy."""
        try:
            with self.cursor() as cur:
                cur.execute("SELECT 1")
                result = cur.fetchone()
                return result is not None, None
        except Exception as e:
            return False, str(e)

    def execute_query(
        self,
        query: str,
        params: Optional[tuple] = None
    ) -> list[dict[str, Any]]:
        """Execute a query and return results as list of dicts."""
        with self.cursor() as cur:
            cur.execute(query, params)
            columns = [desc[0].lower() for desc in cur.description] if cur.description else []
            rows = cur.fetchall()
            return [dict(zip(columns, row)) for row in rows]

    def execute_one(
        self,
        query: str,
        params: Optional[tuple] = None
    ) -> Optional[dict[str, Any]]:
        """Execute a query and return single result."""
        results = self.execute_query(query, params)
        return results[0] if results else None

    def execute_write(
        self,
        query: str,
        params: Optional[tuple] = None
    ) -> int:
        """Execute an INSERT/UPDATE/DELETE and return affected rows."""
        with self.cursor() as cur:
            cur.execute(query, params)
            return cur.rowcount

    # ================================================================
    # Workshop Methods
    # ================================================================

    def insert_workshop(
        self,
        workshop_id: str,
        company_name: str,
        industry: Optional[str],
        facilitator_name: Optional[str],
        status: str,
        now: datetime,
    ) -> None:
        """Insert a workshop row with empty step outputs."""
        query = """
            INSERT INTO workshops (
                id, company_name, industry, facilitator_name, status,
                workflow_maps, data_lineage, created_at, updated_at
            )
            SELECT %s, %s, %s, %s, %s, PARSE_JSON('[]'), PARSE_JSON('[]'), %s, %s
        """
        self.execute_write(query, (
            workshop_id, company_name, industry, facilitator_name, status, now, now
        ))
        logger.info(f"Inserted workshop {workshop_id} for {company_name}")

    def get_workshop(self, workshop_id: str) -> Optional[dict[str, Any]]:
        """Get a workshop row with VARIANT columns parsed."""
        row = self.execute_one("SELECT * FROM workshops WHERE id = %s", (workshop_id,))
        if row is None:
            return None
        for column in WORKSHOP_JSON_COLUMNS:
            if column in row:
                row[column] = _loads(row[column])
        return row

    def get_workshops(
        self,
        status: Optional[str] = None,
        limit: int = 20,
        offset: int = 0
    ) -> list[dict[str, Any]]:
        """List workshop summary rows, newest first."""
        conditions = []
        params: list[Any] = []
        if status:
            conditions.append("status = %s")
            params.append(status)
        where_clause = " AND ".join(conditions) if conditions else "1=1"
        query = f"""
            SELECT id, company_name, industry, facilitator_name, status,
                   created_at, updated_at
            FROM workshops
            WHERE {where_clause}
            ORDER BY created_at DESC
            LIMIT %s OFFSET %s
        """
        params.extend([limit, offset])
        return self.execute_query(query, tuple(params))

    def count_workshops(self, status: Optional[str] = None) -> int:
        """Count workshops with an optional status filter."""
        if status:
            result = self.execute_one(
                "SELECT COUNT(*) AS count FROM workshops WHERE status = %s", (status,)
            )
        else:
            result = self.execute_one("SELECT COUNT(*) AS count FROM workshops")
        return result["count"] if result else 0

    def update_workshop(self, workshop_id: str, fields: dict[str, Any]) -> int:
        """Update scalar and VARIANT columns of a workshop.

        ``fields`` values for VARIANT columns must be JSON-serializable.
        """
        assignments = []
        params: list[Any] = []
        for column, value in fields.items():
            if column in WORKSHOP_JSON_COLUMNS:
                assignments.append(f"{column} = PARSE_JSON(%s)")
                params.append(_dumps(value))
            elif column in WORKSHOP_SCALAR_COLUMNS:
                assignments.append(f"{column} = %s")
                params.append(value)
            else:
                raise ValueError(f"Unknown workshop column: {column}")
        assignments.append("updated_at = %s")
        params.append(datetime.now(timezone.utc))
        params.append(workshop_id)
        query = f"UPDATE workshops SET {', '.join(assignments)} WHERE id = %s"
        return self.execute_write(query, tuple(params))

    # ================================================================
    # Use Case Methods
    # ================================================================

    def replace_use_cases(self, workshop_id: str, use_cases: list[dict[str, Any]]) -> int:
        """Replace all use cases of a workshop. Each dict must carry ``id``."""
        now = datetime.now(timezone.utc)
        query = """
            INSERT INTO use_cases (workshop_id, id, position, data, created_at, updated_at)
            SELECT %s, %s, %s, PARSE_JSON(%s), %s, %s
        """
        # Sessions autocommit; an explicit transaction lets a failed insert roll back the delete
        with self.cursor() as cur:
            cur.execute("BEGIN")
            cur.execute("DELETE FROM use_cases WHERE workshop_id = %s", (workshop_id,))
            for position, use_case in enumerate(use_cases):
                cur.execute(query, (
                    workshop_id, use_case["id"], position, _dumps(use_case), now, now
                ))
        logger.info(f"Stored {len(use_cases)} use cases for workshop {workshop_id}")
        return len(use_cases)

    def get_use_cases(self, workshop_id: str) -> list[dict[str, Any]]:
        rows = self.execute_query(
            "SELECT data FROM use_cases WHERE workshop_id = %s ORDER BY position",
            (workshop_id,),
        )
        return [_loads(r["data"]) for r in rows]

    def update_use_case(self, workshop_id: str, use_case: dict[str, Any]) -> int:
        return self.execute_write(
            """
            UPDATE use_cases SET data = PARSE_JSON(%s), updated_at = %s
            WHERE workshop_id = %s AND id = %s
            """,
            (_dumps(use_case), datetime.now(timezone.utc), workshop_id, use_case["id"]),
        )

    # ================================================================
    # Challenge Log Methods
    # ================================================================

    def insert_challenge(self, entry: dict[str, Any]) -> None:
        """Append one challenge log row."""
        query = """
            INSERT INTO challenge_logs (
                id, workshop_id, use_case_id, batch_id, challenge_type,
                field_name, severity, original_value, challenged_value,
                evidence, status, created_at
            )
            SELECT %s, %s, %s, %s, %s, %s, %s, PARSE_JSON(%s), PARSE_JSON(%s), %s, %s, %s
        """
        self.execute_write(query, (
            str(entry["id"]),
            str(entry["workshop_id"]),
            entry["use_case_id"],
            str(entry["batch_id"]),
            entry["challenge_type"],
            entry["field_name"],
            entry["severity"],
            _dumps(entry["original_value"]),
            _dumps(entry["challenged_value"]),
            entry["evidence"],
            entry["status"],
            entry["created_at"],
        ))

    def get_challenges(
        self,
        workshop_id: str,
        status: Optional[str] = None,
        batch_id: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        """Challenge log rows for a workshop in creation order."""
        conditions = ["workshop_id = %s"]
        params: list[Any] = [workshop_id]
        if status:
            conditions.append("status = %s")
            params.append(status)
        if batch_id:
            conditions.append("batch_id = %s")
            params.append(batch_id)
        query = f"""
            SELECT * FROM challenge_logs
            WHERE {' AND '.join(conditions)}
            ORDER BY created_at, id
        """
        rows = self.execute_query(query, tuple(params))
        for r in rows:
            r["original_value"] = _loads(r.get("original_value"))
            r["challenged_value"] = _loads(r.get("challenged_value"))
        return rows

    def get_challenge(self, workshop_id: str, challenge_id: str) -> Optional[dict[str, Any]]:
        row = self.execute_one(
            "SELECT * FROM challenge_logs WHERE workshop_id = %s AND id = %s",
            (workshop_id, challenge_id),
        )
        if row is not None:
            row["original_value"] = _loads(row.get("original_value"))
            row["challenged_value"] = _loads(row.get("challenged_value"))
        return row

    def resolve_challenge(
        self,
        challenge_id: str,
        status: str,
        responded_by: str,
        responded_at: datetime,
    ) -> int:
        """Conditionally resolve a pending challenge. Returns affected rows (0 or 1)."""
        return self.execute_write(
            """
            UPDATE challenge_logs
            SET status = %s, responded_by = %s, responded_at = %s
            WHERE id = %s AND status = 'pending'
            """,
            (status, responded_by, responded_at, challenge_id),
        )

    # ================================================================
    # Survey Response Methods
    # ================================================================

    def insert_survey_response(
        self,
        response_id: str,
        workshop_id: str,
        respondent: Optional[str],
        answers: list[dict[str, Any]],
        readiness_scores: dict[str, Any],
    ) -> None:
        query = """
            INSERT INTO survey_responses (
                id, workshop_id, respondent, answers, readiness_scores, created_at
            )
            SELECT %s, %s, %s, PARSE_JSON(%s), PARSE_JSON(%s), %s
        """
        self.execute_write(query, (
            response_id, workshop_id, respondent, _dumps(answers),
            _dumps(readiness_scores), datetime.now(timezone.utc)
        ))


# Singleton instance
_snowflake_service: Optional[SnowflakeService] = None


def get_snowflake_service() -> SnowflakeService:
    """Get or create Snowflake service singleton."""
    global _snowflake_service
    if _snowflake_service is None:
        _snowflake_service = SnowflakeService()
    return _snowflake_service
