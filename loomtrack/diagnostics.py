"""직기 상태 점검 스크립트 — 운영 중 직기 상태를 확인/복구.

Loom diagnostics script — Inspect and repair loom run state from a shell.

Usage:
    python -m loomtrack.diagnostics check      # 상태 점검 (report only)
    python -m loomtrack.diagnostics fix        # 불일치 복구 (repair inconsistent looms)
    python -m loomtrack.diagnostics stop-all   # 전체 정지 (stop every running loom)
"""

import argparse
import asyncio

from loomtrack.database import async_session
from loomtrack.services.diagnostics_service import diagnostics_service
from loomtrack.utils.clock import system_clock


async def run(command: str) -> int:
    """점검 명령을 실행하고 종료 코드를 반환합니다.

    Run a diagnostics command. `check` exits 1 when any loom is inconsistent.
    """
    async with async_session() as db:
        if command == "check":
            report: dict = await diagnostics_service.diagnose(db)
            for entry in report["looms"]:
                mark: str = "ok " if entry["consistent"] else "BAD"
                since: str = entry["running_since"].isoformat() if entry["running_since"] else "-"
                print(f"[{mark}] {entry['loom_code']:<12} {entry['run_status']:<8} since={since}")
            print(
                f"total={report['total']} running={report['running']} "
                f"stopped={report['stopped']} inconsistent={report['inconsistent']}"
            )
            return 1 if report["inconsistent"] else 0

        if command == "fix":
            repaired: int = await diagnostics_service.repair(db, system_clock.now())
            await db.commit()
            print(f"Repaired {repaired} loom(s)")
            return 0

        stopped: int = await diagnostics_service.stop_all(db)
        await db.commit()
        print(f"Stopped {stopped} loom(s)")
        return 0


def main() -> None:
    parser = argparse.ArgumentParser(prog="python -m loomtrack.diagnostics", description="Loom run-state diagnostics")
    parser.add_argument("command", choices=["check", "fix", "stop-all"])
    args = parser.parse_args()
    raise SystemExit(asyncio.run(run(args.command)))


if __name__ == "__main__":
    main()
