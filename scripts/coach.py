"""Command line access to training analysis and planning.

Examples:
    python scripts/coach.py analyze --athlete 42 --days 28
    python scripts/coach.py plan --athlete 42 --weeks 8 --output plan.json
    python scripts/coach.py adapt --athlete 42 --plan plan.json
    python scripts/coach.py ingest --athlete 42 --limit 5
"""

import json
import sys
from datetime import date
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from config.settings import settings, validate_settings
from models.training import TrainingPlan
from coaching.activity_store import SqlActivityStore
from coaching.coach_feedback import CoachFeedbackService
from coaching.exceptions import TrainingDataError
from coaching.plan_adapter import adapt_training_plan
from coaching.plan_generator import PLAN_WEEKS, PlanGenerator
from coaching.strava_client import create_strava_client
from coaching.stream_ingestion import StreamIngestor
from coaching.training_aggregator import TrainingDataAggregator
from coaching.logger import get_logger, set_level

logger = get_logger(__name__)


def _thresholds(store: SqlActivityStore, athlete_id: str, args) -> tuple:
    stored_ftp, stored_lthr = store.get_athlete_thresholds(athlete_id)
    ftp = args.ftp or stored_ftp or settings.DEFAULT_FTP
    lthr = args.lthr or stored_lthr or settings.DEFAULT_LTHR
    return ftp, lthr


def run_analyze(args) -> int:
    store = SqlActivityStore()
    ftp, lthr = _thresholds(store, args.athlete, args)
    aggregator = TrainingDataAggregator(store)

    try:
        analysis = aggregator.analyze_recent_training(args.athlete, ftp, lthr, days_back=args.days)
    except TrainingDataError as e:
        logger.error(f"Analysis failed: {e}")
        return 1

    output = analysis.model_dump(mode="json")
    if args.feedback:
        stats = store.get_activity_stats(args.athlete, args.days)
        output["feedback"] = CoachFeedbackService().get_weekly_feedback(analysis, stats).model_dump(mode="json")

    print(json.dumps(output, indent=2))
    return 0


def run_plan(args) -> int:
    store = SqlActivityStore()
    ftp, lthr = _thresholds(store, args.athlete, args)
    generator = PlanGenerator(TrainingDataAggregator(store))

    start = date.fromisoformat(args.start) if args.start else None
    plan = generator.generate_polarized_plan(args.athlete, args.weeks, ftp, lthr, start_date=start)
    _write_plan(plan, args.output)
    return 0


def run_adapt(args) -> int:
    store = SqlActivityStore()
    ftp, lthr = _thresholds(store, args.athlete, args)

    plan = TrainingPlan.model_validate_json(Path(args.plan).read_text(encoding="utf-8"))
    try:
        analysis = TrainingDataAggregator(store).analyze_recent_training(args.athlete, ftp, lthr, days_back=args.days)
    except TrainingDataError as e:
        logger.error(f"Analysis failed, plan left unchanged: {e}")
        return 1

    adapted = adapt_training_plan(plan, analysis)
    _write_plan(adapted, args.output or args.plan)
    return 0


def run_ingest(args) -> int:
    store = SqlActivityStore()
    ftp, lthr = _thresholds(store, args.athlete, args)

    try:
        activities = store.get_recent_activities(args.athlete, args.days)
    except TrainingDataError as e:
        logger.error(f"Could not list activities: {e}")
        return 1

    pending = [a.id for a in activities if a.streams is None]
    if not pending:
        logger.info("All recent activities already have streams")
        return 0

    try:
        telemetry = create_strava_client()
    except ValueError as e:
        logger.error(str(e))
        return 2

    StreamIngestor(store, telemetry).ingest_streams(pending, ftp, lthr, max_activities=args.limit)
    return 0


def _write_plan(plan: TrainingPlan, output) -> None:
    payload = plan.model_dump_json(indent=2)
    if output:
        Path(output).write_text(payload, encoding="utf-8")
        logger.info(f"Wrote plan {plan.id} with {len(plan.sessions)} sessions to {output}")
    else:
        print(payload)


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Ride Coach training analysis and planning")
    parser.add_argument("--verbose", action="store_true", help="Log debug details")
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_common(sub):
        sub.add_argument("--athlete", required=True, help="Athlete id")
        sub.add_argument("--ftp", type=int, help="Override FTP in watts")
        sub.add_argument("--lthr", type=int, help="Override lactate threshold heart rate")

    analyze = subparsers.add_parser("analyze", help="Analyze recent training")
    add_common(analyze)
    analyze.add_argument("--days", type=int, default=settings.ANALYSIS_DAYS_BACK, help="Days to analyze")
    analyze.add_argument("--feedback", action="store_true", help="Include weekly feedback text")
    analyze.set_defaults(func=run_analyze)

    plan = subparsers.add_parser("plan", help="Generate a polarized training plan")
    add_common(plan)
    plan.add_argument("--weeks", type=int, choices=PLAN_WEEKS, default=8, help="Plan length in weeks")
    plan.add_argument("--start", help="First day of the plan (YYYY-MM-DD)")
    plan.add_argument("--output", help="Write the plan JSON to this file")
    plan.set_defaults(func=run_plan)

    adapt = subparsers.add_parser("adapt", help="Adapt a saved plan to recent training")
    add_common(adapt)
    adapt.add_argument("--plan", required=True, help="Plan JSON file")
    adapt.add_argument("--days", type=int, default=settings.ANALYSIS_DAYS_BACK, help="Days to analyze")
    adapt.add_argument("--output", help="Write the adapted plan here (defaults to --plan)")
    adapt.set_defaults(func=run_adapt)

    ingest = subparsers.add_parser("ingest", help="Fetch Strava streams and time in zones for recent activities")
    add_common(ingest)
    ingest.add_argument("--days", type=int, default=settings.ANALYSIS_DAYS_BACK, help="Days to look back")
    ingest.add_argument("--limit", type=int, default=settings.STREAM_INGEST_MAX_ACTIVITIES, help="Activities per run")
    ingest.set_defaults(func=run_ingest)

    args = parser.parse_args()
    if args.verbose:
        set_level("DEBUG")
    try:
        validate_settings()
    except ValueError as e:
        logger.error(str(e))
        sys.exit(2)
    sys.exit(args.func(args))
