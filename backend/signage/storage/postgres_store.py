# backend/signage/storage/postgres_store.py
import logging
from contextlib import contextmanager
from typing import Callable, Dict, List, Optional

from signage.config import get_db_connection
from signage.models.advertisement import AdKind, AdMedia
from signage.models.campaign import Campaign
from signage.models.models import TV
from signage.models.placement_models import Assignment, AssignmentResult

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS tvs (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    description TEXT,
    unique_url TEXT
);

CREATE TABLE IF NOT EXISTS campaigns (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    start_time TIMESTAMPTZ NOT NULL,
    end_time TIMESTAMPTZ NOT NULL,
    CHECK (start_time < end_time)
);

CREATE TABLE IF NOT EXISTS ads (
    id TEXT PRIMARY KEY,
    campaign_id TEXT NOT NULL REFERENCES campaigns (id) ON DELETE CASCADE,
    name TEXT NOT NULL,
    type TEXT NOT NULL,
    url TEXT NOT NULL,
    file_name TEXT,
    duration_seconds INTEGER,
    start_time TIMESTAMPTZ,
    end_time TIMESTAMPTZ
);

CREATE TABLE IF NOT EXISTS campaign_tvs (
    campaign_id TEXT NOT NULL REFERENCES campaigns (id) ON DELETE CASCADE,
    tv_id TEXT NOT NULL REFERENCES tvs (id) ON DELETE CASCADE,
    assigned_at TIMESTAMPTZ NOT NULL DEFAULT now(),
    PRIMARY KEY (campaign_id, tv_id)
);
"""

_AD_COLUMNS = "id, campaign_id, name, type, url, file_name, duration_seconds, start_time, end_time"


def _row_to_ad(row) -> AdMedia:
    return AdMedia(
        id=row[0],
        name=row[2],
        kind=AdKind(row[3]),
        media_url=row[4],
        file_name=row[5],
        display_seconds=row[6],
        start=row[7],
        end=row[8],
    )


def _row_to_tv(row) -> TV:
    return TV(id=row[0], name=row[1], description=row[2], unique_url=row[3])


class PostgresStore:
    """
    Store backed by PostgreSQL through psycopg2.

    One connection per call, closed at the end, commit on success.
    Cascades (TV -> assignments, campaign -> ads/assignments) are done by
    the foreign keys, and the campaign_tvs primary key is the backstop for
    two assignment requests racing past the conflict check.
    """

    def __init__(self, connection_factory: Callable = get_db_connection) -> None:
        self._connect = connection_factory

    @contextmanager
    def _cursor(self):
        conn = self._connect()
        cur = conn.cursor()
        try:
            yield cur
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            cur.close()
            conn.close()

    def init_schema(self) -> None:
        with self._cursor() as cur:
            cur.execute(SCHEMA_SQL)
        logger.info("database schema ensured")

    # -----------------------------
    #  TVs
    # -----------------------------
    def list_tvs(self) -> List[TV]:
        with self._cursor() as cur:
            cur.execute("SELECT id, name, description, unique_url FROM tvs ORDER BY name, id;")
            return [_row_to_tv(row) for row in cur.fetchall()]

    def get_tv(self, tv_id: str) -> Optional[TV]:
        with self._cursor() as cur:
            cur.execute(
                "SELECT id, name, description, unique_url FROM tvs WHERE id = %s;",
                (tv_id,),
            )
            row = cur.fetchone()
        if row is None:
            return None
        return _row_to_tv(row)

    def create_tv(self, tv: TV) -> TV:
        with self._cursor() as cur:
            cur.execute(
                "INSERT INTO tvs (id, name, description, unique_url) VALUES (%s, %s, %s, %s);",
                (tv.id, tv.name, tv.description, tv.unique_url),
            )
        return tv

    def update_tv(self, tv: TV) -> Optional[TV]:
        with self._cursor() as cur:
            cur.execute(
                "UPDATE tvs SET name = %s, description = %s, unique_url = %s WHERE id = %s;",
                (tv.name, tv.description, tv.unique_url, tv.id),
            )
            updated = cur.rowcount > 0
        return tv if updated else None

    def delete_tv(self, tv_id: str) -> bool:
        with self._cursor() as cur:
            cur.execute("DELETE FROM tvs WHERE id = %s;", (tv_id,))
            return cur.rowcount > 0

    # -----------------------------
    #  Campaigns
    # -----------------------------
    def _load_campaigns(self, where: str = "", params: tuple = ()) -> List[Campaign]:
        """
        Three queries (campaigns, their ads, their TV links) instead of two
        extra queries per campaign.
        """
        with self._cursor() as cur:
            cur.execute(
                f"SELECT c.id, c.name, c.start_time, c.end_time FROM campaigns c {where} ORDER BY c.id;",
                params,
            )
            campaign_rows = cur.fetchall()
            if not campaign_rows:
                return []
            ids = [row[0] for row in campaign_rows]

            cur.execute(
                f"SELECT {_AD_COLUMNS} FROM ads WHERE campaign_id = ANY(%s) ORDER BY id;",
                (ids,),
            )
            ads_by_campaign: Dict[str, List[AdMedia]] = {}
            for row in cur.fetchall():
                ads_by_campaign.setdefault(row[1], []).append(_row_to_ad(row))

            cur.execute(
                "SELECT campaign_id, tv_id FROM campaign_tvs WHERE campaign_id = ANY(%s) ORDER BY tv_id;",
                (ids,),
            )
            tvs_by_campaign: Dict[str, List[str]] = {}
            for campaign_id, tv_id in cur.fetchall():
                tvs_by_campaign.setdefault(campaign_id, []).append(tv_id)

        return [
            Campaign(
                id=row[0],
                name=row[1],
                start=row[2],
                end=row[3],
                ads=ads_by_campaign.get(row[0], []),
                assigned_tv_ids=tvs_by_campaign.get(row[0], []),
            )
            for row in campaign_rows
        ]

    def list_all_campaigns(self) -> List[Campaign]:
        return self._load_campaigns()

    def list_campaigns_assigned_to(self, tv_id: str) -> List[Campaign]:
        return self._load_campaigns(
            "JOIN campaign_tvs ct ON c.id = ct.campaign_id WHERE ct.tv_id = %s",
            (tv_id,),
        )

    def get_campaign(self, campaign_id: str) -> Optional[Campaign]:
        found = self._load_campaigns("WHERE c.id = %s", (campaign_id,))
        return found[0] if found else None

    def create_campaign(self, campaign: Campaign) -> Campaign:
        with self._cursor() as cur:
            cur.execute(
                "INSERT INTO campaigns (id, name, start_time, end_time) VALUES (%s, %s, %s, %s);",
                (campaign.id, campaign.name, campaign.start, campaign.end),
            )
            for ad in campaign.ads:
                self._insert_ad(cur, campaign.id, ad)
        return campaign.model_copy(update={"assigned_tv_ids": []})

    def update_campaign(self, campaign: Campaign) -> Optional[Campaign]:
        with self._cursor() as cur:
            cur.execute(
                "UPDATE campaigns SET name = %s, start_time = %s, end_time = %s WHERE id = %s;",
                (campaign.name, campaign.start, campaign.end, campaign.id),
            )
            updated = cur.rowcount > 0
        if not updated:
            return None
        return self.get_campaign(campaign.id)

    def delete_campaign(self, campaign_id: str) -> bool:
        with self._cursor() as cur:
            cur.execute("DELETE FROM campaigns WHERE id = %s;", (campaign_id,))
            return cur.rowcount > 0

    # -----------------------------
    #  Ads
    # -----------------------------
    @staticmethod
    def _insert_ad(cur, campaign_id: str, ad: AdMedia) -> None:
        cur.execute(
            f"INSERT INTO ads ({_AD_COLUMNS}) VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s);",
            (
                ad.id,
                campaign_id,
                ad.name,
                ad.kind.value,
                ad.media_url,
                ad.file_name,
                ad.display_seconds,
                ad.start,
                ad.end,
            ),
        )

    def add_ad(self, campaign_id: str, ad: AdMedia) -> Optional[AdMedia]:
        with self._cursor() as cur:
            cur.execute("SELECT 1 FROM campaigns WHERE id = %s;", (campaign_id,))
            if cur.fetchone() is None:
                return None
            self._insert_ad(cur, campaign_id, ad)
        return ad

    def update_ad(self, campaign_id: str, ad: AdMedia) -> Optional[AdMedia]:
        with self._cursor() as cur:
            cur.execute(
                """
                UPDATE ads
                SET name = %s, type = %s, url = %s, file_name = %s,
                    duration_seconds = %s, start_time = %s, end_time = %s
                WHERE id = %s AND campaign_id = %s;
                """,
                (
                    ad.name,
                    ad.kind.value,
                    ad.media_url,
                    ad.file_name,
                    ad.display_seconds,
                    ad.start,
                    ad.end,
                    ad.id,
                    campaign_id,
                ),
            )
            updated = cur.rowcount > 0
        return ad if updated else None

    def delete_ad(self, campaign_id: str, ad_id: str) -> bool:
        with self._cursor() as cur:
            cur.execute("DELETE FROM ads WHERE id = %s AND campaign_id = %s;", (ad_id, campaign_id))
            return cur.rowcount > 0

    # -----------------------------
    #  Assignments
    # -----------------------------
    def create_assignment(self, campaign_id: str, tv_id: str) -> AssignmentResult:
        with self._cursor() as cur:
            cur.execute(
                """
                INSERT INTO campaign_tvs (campaign_id, tv_id)
                VALUES (%s, %s)
                ON CONFLICT (campaign_id, tv_id) DO NOTHING;
                """,
                (campaign_id, tv_id),
            )
            created = cur.rowcount > 0
        return AssignmentResult.CREATED if created else AssignmentResult.ALREADY_EXISTS

    def delete_assignment(self, campaign_id: str, tv_id: str) -> bool:
        with self._cursor() as cur:
            cur.execute(
                "DELETE FROM campaign_tvs WHERE campaign_id = %s AND tv_id = %s;",
                (campaign_id, tv_id),
            )
            return cur.rowcount > 0

    def list_assignments(self, tv_id: Optional[str] = None) -> List[Assignment]:
        with self._cursor() as cur:
            if tv_id is None:
                cur.execute("SELECT campaign_id, tv_id, assigned_at FROM campaign_tvs ORDER BY assigned_at;")
            else:
                cur.execute(
                    "SELECT campaign_id, tv_id, assigned_at FROM campaign_tvs WHERE tv_id = %s ORDER BY assigned_at;",
                    (tv_id,),
                )
            rows = cur.fetchall()
        return [Assignment(campaign_id=r[0], tv_id=r[1], assigned_at=r[2]) for r in rows]
