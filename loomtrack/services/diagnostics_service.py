"""직기 상태 점검 서비스 — 가동 상태 불일치 탐지 및 복구.

Loom Diagnostics Service — Detects looms whose run_status disagrees with
running_since, repairs them, and can stop every loom at once.
"""

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from loomtrack.models.loom import LOOM_RUNNING, LOOM_STOPPED, Loom
from loomtrack.repositories.loom_repository import loom_repository

logger = logging.getLogger(__name__)


def is_consistent(loom: Loom) -> bool:
    if loom.run_status == LOOM_RUNNING:
        return loom.running_since is not None
    return loom.run_status == LOOM_STOPPED and loom.running_since is None


class DiagnosticsService:
    """직기 상태 점검 서비스 (Loom run-state diagnostics service)."""

    async def diagnose(self, db: AsyncSession) -> dict:
        """전체 직기의 가동 상태를 점검합니다.

        Report every loom's run state and whether it satisfies the
        running ⇔ running_since invariant.
        """
        looms = await loom_repository.get_all_ordered(db)
        entries: list[dict] = [
            {
                "loom_id": str(loom.id),
                "loom_code": loom.loom_code,
                "run_status": loom.run_status,
                "running_since": loom.running_since,
                "current_weaver_id": str(loom.current_weaver_id) if loom.current_weaver_id else None,
                "consistent": is_consistent(loom),
            }
            for loom in looms
        ]
        return {
            "total": len(entries),
            "running": sum(1 for e in entries if e["run_status"] == LOOM_RUNNING),
            "stopped": sum(1 for e in entries if e["run_status"] != LOOM_RUNNING),
            "inconsistent": sum(1 for e in entries if not e["consistent"]),
            "looms": entries,
        }

    async def repair(self, db: AsyncSession, now: datetime) -> int:
        """불일치 직기를 복구합니다 (Repair inconsistent looms).

        Returns:
            int: 복구된 직기 수 (Number of repaired looms)
        """
        repaired: int = await loom_repository.repair_run_state(db, now)
        if repaired:
            logger.warning("repaired run state of %d loom(s)", repaired)
        return repaired

    async def stop_all(self, db: AsyncSession) -> int:
        """모든 가동 중 직기를 정지합니다 (Stop every running loom)."""
        stopped: int = await loom_repository.stop_all(db)
        logger.info("stopped %d running loom(s)", stopped)
        return stopped


# 싱글턴 인스턴스 — Singleton instance
diagnostics_service: DiagnosticsService = DiagnosticsService()
