"""
Schema health check.

Probes every table the engine reads with its preferred projection and, where
the table has a known older layout, with the legacy one. The verdict per table
is ``healthy`` (preferred shape works), ``warning`` (only the legacy shape works,
or an optional table is missing) or ``error``.
"""

from dataclasses import dataclass
from typing import List, Optional

from loguru import logger

from social_engine.backend.base import RemoteBackend, TableQuery
from social_engine.core.query_executor import CandidateQuery, execute_candidates
from social_engine.models.dtos import HealthCheckResult, HealthReport, HealthStatus

PREFERRED = "preferred"
LEGACY = "legacy"


@dataclass(frozen=True)
class TableProbe:
    table: str
    columns: str
    error_issue: str
    error_recommendation: str
    legacy_columns: Optional[str] = None
    legacy_recommendation: Optional[str] = None
    optional: bool = False


PROBES = [
    TableProbe(
        table="profiles",
        columns="id",
        error_issue="Table not accessible",
        error_recommendation="Ensure profiles table exists and has proper RLS policies",
    ),
    TableProbe(
        table="works",
        columns="id, author_id",
        error_issue="Table not accessible or missing author_id column",
        error_recommendation="Check if works table uses author_id (not user_id) column",
    ),
    TableProbe(
        table="comments",
        columns="id, text, author_id",
        error_issue="Table not accessible",
        error_recommendation="Ensure comments table exists with proper schema",
        legacy_columns="id, content, user_id",
        legacy_recommendation="Update comments table: content -> text, user_id -> author_id",
    ),
    TableProbe(
        table="follows",
        columns="follower_id, followee_id",
        error_issue="Table not accessible",
        error_recommendation="Ensure follows table exists with proper schema",
        legacy_columns="follower_id, followed_id",
        legacy_recommendation="Update follows table: followed_id -> followee_id",
    ),
    TableProbe(
        table="likes",
        columns="user_id, work_id",
        error_issue="Table not accessible",
        error_recommendation="Ensure likes table exists and has proper RLS policies",
    ),
    TableProbe(
        table="work_views",
        columns="id",
        error_issue="Optional table not found",
        error_recommendation="Create work_views table for view tracking (optional feature)",
        optional=True,
    ),
]

LEGACY_ISSUE = "Using legacy column names"


async def check_table(backend: RemoteBackend, probe: TableProbe) -> HealthCheckResult:
    candidates = [
        CandidateQuery(
            PREFERRED,
            lambda: backend.select(TableQuery(table=probe.table, columns=probe.columns, limit=1)),
        )
    ]
    if probe.legacy_columns:
        candidates.append(
            CandidateQuery(
                LEGACY,
                lambda: backend.select(
                    TableQuery(table=probe.table, columns=probe.legacy_columns, limit=1)
                ),
            )
        )

    outcome = await execute_candidates(candidates, None, f"health check of {probe.table}")

    if outcome.variant == PREFERRED:
        return HealthCheckResult(status=HealthStatus.HEALTHY, table=probe.table)
    if outcome.variant == LEGACY:
        return HealthCheckResult(
            status=HealthStatus.WARNING,
            table=probe.table,
            issue=LEGACY_ISSUE,
            recommendation=probe.legacy_recommendation,
        )
    return HealthCheckResult(
        status=HealthStatus.WARNING if probe.optional else HealthStatus.ERROR,
        table=probe.table,
        issue=probe.error_issue,
        recommendation=probe.error_recommendation,
    )


async def run_health_check(backend: RemoteBackend, probes: Optional[List[TableProbe]] = None) -> HealthReport:
    """
    Probe each known table in turn.

    Args:
        backend: Backend to probe
        probes: Tables to check; defaults to every table the engine reads

    Returns:
        HealthReport with one result per probe, in probe order
    """
    logger.info("Running database health check...")
    report = HealthReport()
    for probe in probes or PROBES:
        result = await check_table(backend, probe)
        report.results.append(result)

        if result.status == HealthStatus.HEALTHY:
            logger.info(f"{result.table}: {result.status.value}")
        else:
            logger.warning(f"{result.table}: {result.status.value} - {result.issue}. Fix: {result.recommendation}")

    logger.info(f"Health check finished: {report.counts}")
    return report


_MIGRATIONS = {
    "work_views": """-- Create work_views table for analytics
CREATE TABLE IF NOT EXISTS work_views (
  id UUID DEFAULT gen_random_uuid() PRIMARY KEY,
  work_id UUID REFERENCES works(id) ON DELETE CASCADE,
  user_id UUID REFERENCES profiles(id) ON DELETE SET NULL,
  created_at TIMESTAMP WITH TIME ZONE DEFAULT NOW(),
  UNIQUE(work_id, user_id)
);

CREATE INDEX IF NOT EXISTS idx_work_views_work_id ON work_views(work_id);
CREATE INDEX IF NOT EXISTS idx_work_views_user_id ON work_views(user_id);
""",
    "comments": """-- Update comments table schema
DO $$
BEGIN
    IF NOT EXISTS (SELECT 1 FROM information_schema.columns WHERE table_name = 'comments' AND column_name = 'text') THEN
        ALTER TABLE comments ADD COLUMN text TEXT;
        UPDATE comments SET text = content WHERE content IS NOT NULL;
    END IF;

    IF NOT EXISTS (SELECT 1 FROM information_schema.columns WHERE table_name = 'comments' AND column_name = 'author_id') THEN
        ALTER TABLE comments ADD COLUMN author_id UUID;
        UPDATE comments SET author_id = user_id WHERE user_id IS NOT NULL;
        ALTER TABLE comments ADD CONSTRAINT fk_comments_author FOREIGN KEY (author_id) REFERENCES profiles(id);
    END IF;
END $$;
""",
    "follows": """-- Update follows table schema
DO $$
BEGIN
    IF NOT EXISTS (SELECT 1 FROM information_schema.columns WHERE table_name = 'follows' AND column_name = 'followee_id') THEN
        ALTER TABLE follows ADD COLUMN followee_id UUID;
        UPDATE follows SET followee_id = followed_id WHERE followed_id IS NOT NULL;
        ALTER TABLE follows ADD CONSTRAINT fk_follows_followee FOREIGN KEY (followee_id) REFERENCES profiles(id);
    END IF;
END $$;
""",
}


def generate_migration_script(report: HealthReport) -> str:
    """SQL that fixes the issues the report can fix automatically."""
    parts = ["-- Auto-generated migration script based on health check\n"]
    for result in report.results:
        if result.status == HealthStatus.HEALTHY:
            continue
        if result.table == "work_views":
            parts.append(_MIGRATIONS["work_views"])
        elif result.table in ("comments", "follows") and result.issue == LEGACY_ISSUE:
            parts.append(_MIGRATIONS[result.table])
    return "\n".join(parts)
