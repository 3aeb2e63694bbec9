# core/management/commands/rollover_school_year.py
import logging

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from core.models import School, current_school_year

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Move schools still on a past school year to the current one'

    def add_arguments(self, parser):
        parser.add_argument(
            '--school',
            help='Code of a single school to roll over (defaults to every live school)',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Report what would change without saving',
        )

    def handle(self, *args, **options):
        code = options.get('school')
        dry_run = options.get('dry_run')
        target = current_school_year(timezone.localdate())

        schools = School.objects.order_by('code')
        if code:
            schools = schools.filter(code=code.upper())
            if not schools.exists():
                raise CommandError(f"School {code} not found")

        changed = 0
        for school in schools:
            # labels are YYYY-YYYY so string order is chronological
            if school.school_year >= target:
                continue
            self.stdout.write(f"{school.code}: {school.school_year} -> {target}")
            changed += 1
            if dry_run:
                continue
            previous = school.school_year
            school.school_year = target
            school.save(update_fields=['school_year', 'updated_at'])
            logger.info(f"School {school.pk} rolled over from {previous} to {target}")

        verb = 'would roll over' if dry_run else 'rolled over'
        self.stdout.write(self.style.SUCCESS(f"{changed} school(s) {verb} to {target}"))
