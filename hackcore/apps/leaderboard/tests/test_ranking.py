from datetime import date
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings

from hackcore.apps.core.errors import NoScoresError, PhaseError
from hackcore.apps.events.models import Event, Phase
from hackcore.apps.leaderboard.models import ShortlistEntry
from hackcore.apps.leaderboard.services.ranking import (
    LeaderboardRow,
    confirm_shortlist,
    judging_leaderboard,
    screening_leaderboard,
    select_top,
)
from hackcore.apps.notifications.models import Notification
from hackcore.apps.registration.models import MemberStatus, Team, TeamMember
from hackcore.apps.scoring.models import ScoreRecord

User = get_user_model()

SCREENING_DAY = date(2026, 3, 12)


def make_event(**overrides) -> Event:
    fields = dict(
        title="Hack Ranking",
        registration_deadline=date(2026, 3, 1),
        proposal_deadline=date(2026, 3, 10),
        execution_start=date(2026, 3, 20),
        execution_end=date(2026, 3, 22),
        phase=Phase.SHORTLISTING,
        shortlist_target_count=3,
    )
    fields.update(overrides)
    return Event.objects.create(**fields)


def record(event, team, total, kind="screening", evaluator=None) -> ScoreRecord:
    # Con pesos 20/20/20/20/20 y todas las dimensiones iguales, total = dimensión
    value = Decimal(str(total))
    return ScoreRecord.objects.create(
        event=event,
        team=team,
        kind=kind,
        evaluator=evaluator,
        innovation=value,
        feasibility=value,
        technical_depth=value,
        presentation_clarity=value,
        social_impact=value,
        total=value,
    )


class ScoredTeamsMixin:
    TOTALS = [9.0, 7.5, 7.5, 6.0, 4.0]

    def make_scored_teams(self, event):
        teams = []
        for i, total in enumerate(self.TOTALS, start=1):
            user = User.objects.create_user(username=f"lider{i}", password="x")
            team = Team.objects.create(event=event, name=f"Equipo {i}", leader=user, status=Team.Status.CONFIRMED)
            TeamMember.objects.create(team=team, event=event, user=user, position=1, status=MemberStatus.LEADER)
            record(event, team, total)
            teams.append(team)
        return teams


class SelectTopTests(TestCase):
    def rows(self, totals):
        return [LeaderboardRow(rank=i, team_id=i, team_name=str(i), total=Decimal(str(t))) for i, t in enumerate(totals, 1)]

    def test_strict_takes_exactly_n(self):
        chosen = select_top(self.rows([9.0, 7.5, 7.5, 6.0, 4.0]), 2, "strict")
        self.assertEqual([r.team_id for r in chosen], [1, 2])

    def test_include_ties_extends_the_cut(self):
        chosen = select_top(self.rows([9.0, 7.5, 7.5, 6.0, 4.0]), 2, "include_ties")
        self.assertEqual([r.team_id for r in chosen], [1, 2, 3])

    def test_fewer_rows_than_n(self):
        self.assertEqual(len(select_top(self.rows([5.0]), 3)), 1)


class LeaderboardTests(ScoredTeamsMixin, TestCase):
    def setUp(self):
        self.event = make_event()
        self.teams = self.make_scored_teams(self.event)

    def test_screening_sorted_desc_with_stable_ties(self):
        rows = screening_leaderboard(self.event)
        self.assertEqual([r.team_id for r in rows], [t.pk for t in self.teams])
        self.assertEqual([r.rank for r in rows], [1, 2, 3, 4, 5])
        self.assertEqual(rows[1].total, rows[2].total)

    def test_fetch_order_does_not_change_distinct_ranks(self):
        other = make_event(title="Permutado")
        names = ["D", "B", "E", "A", "C"]
        totals = [6.0, 8.0, 4.0, 9.0, 7.0]
        for i, (name, total) in enumerate(zip(names, totals)):
            user = User.objects.create_user(username=f"perm{i}", password="x")
            team = Team.objects.create(event=other, name=name, leader=user)
            record(other, team, total)
        self.assertEqual([r.team_name for r in screening_leaderboard(other)], ["A", "B", "C", "D", "E"])

    def test_judging_averages_evaluators(self):
        event = make_event(title="Final", phase=Phase.JUDGING)
        a_user = User.objects.create_user(username="a", password="x")
        b_user = User.objects.create_user(username="b", password="x")
        a = Team.objects.create(event=event, name="A", leader=a_user)
        b = Team.objects.create(event=event, name="B", leader=b_user)
        judges = [User.objects.create_user(username=f"j{i}", password="x", is_staff=True) for i in range(3)]

        for judge, total in zip(judges, ["7.00", "8.00", "8.01"]):
            record(event, a, total, kind="judging", evaluator=judge)
        record(event, b, "9.00", kind="judging", evaluator=judges[0])

        rows = judging_leaderboard(event)
        self.assertEqual([r.team_name for r in rows], ["B", "A"])
        self.assertEqual(rows[1].total, Decimal("7.67"))
        self.assertEqual(rows[1].evaluations, 3)
        self.assertEqual([r.rank for r in rows], [1, 2])


class ConfirmShortlistTests(ScoredTeamsMixin, TestCase):
    def setUp(self):
        self.event = make_event()
        self.teams = self.make_scored_teams(self.event)

    def test_selects_exactly_n_and_advances(self):
        entries = confirm_shortlist(self.event, today=SCREENING_DAY, policy="strict")

        self.assertEqual([e.rank for e in entries], [1, 2, 3])
        self.assertEqual([e.team_id for e in entries], [t.pk for t in self.teams[:3]])
        # Los dos 7.5 quedan ambos dentro, en slots distintos
        self.assertEqual([e.total for e in entries].count(Decimal("7.50")), 2)

        self.event.refresh_from_db()
        self.assertEqual(self.event.phase, Phase.EXECUTION_ACTIVE)
        self.assertFalse(ScoreRecord.objects.filter(event=self.event, kind="screening", locked=False).exists())

    def test_notifies_every_scored_team(self):
        confirm_shortlist(self.event, today=SCREENING_DAY)
        self.assertEqual(Notification.objects.filter(kind="shortlisted").count(), 3)
        self.assertEqual(Notification.objects.filter(kind="not_shortlisted").count(), 2)

    def test_replaces_previous_snapshot(self):
        ShortlistEntry.objects.create(event=self.event, team=self.teams[4], rank=1, total="4.00")
        confirm_shortlist(self.event, today=SCREENING_DAY)
        self.assertEqual(
            list(ShortlistEntry.objects.filter(event=self.event).order_by("rank").values_list("team_id", flat=True)),
            [t.pk for t in self.teams[:3]],
        )

    @override_settings(HACKCORE_SHORTLIST_TIE_POLICY="include_ties")
    def test_tie_policy_from_settings(self):
        Event.objects.filter(pk=self.event.pk).update(shortlist_target_count=2)
        self.event.refresh_from_db()
        entries = confirm_shortlist(self.event, today=SCREENING_DAY)
        self.assertEqual(len(entries), 3)

    def test_second_confirmation_is_a_phase_error(self):
        confirm_shortlist(self.event, today=SCREENING_DAY)
        with self.assertRaises(PhaseError):
            confirm_shortlist(self.event, today=SCREENING_DAY)


class ConfirmWithoutScoresTests(TestCase):
    def test_no_scores(self):
        event = make_event()
        with self.assertRaises(NoScoresError):
            confirm_shortlist(event, today=SCREENING_DAY)
        event.refresh_from_db()
        self.assertEqual(event.phase, Phase.SHORTLISTING)
