from decimal import Decimal

from django.conf import settings
import django.core.validators
from django.db import migrations, models
import django.db.models.deletion


def _dim():
    return models.DecimalField(
        decimal_places=2,
        max_digits=4,
        validators=[
            django.core.validators.MinValueValidator(Decimal('0')),
            django.core.validators.MaxValueValidator(Decimal('10')),
        ],
    )


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('events', '0001_initial'),
        ('registration', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='ScoreRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('kind', models.CharField(choices=[('screening', 'Preselección'), ('judging', 'Evaluación final')], db_index=True, max_length=10)),
                ('innovation', _dim()),
                ('feasibility', _dim()),
                ('technical_depth', _dim()),
                ('presentation_clarity', _dim()),
                ('social_impact', _dim()),
                ('weight_innovation', models.PositiveSmallIntegerField(default=20)),
                ('weight_feasibility', models.PositiveSmallIntegerField(default=20)),
                ('weight_technical_depth', models.PositiveSmallIntegerField(default=20)),
                ('weight_presentation_clarity', models.PositiveSmallIntegerField(default=20)),
                ('weight_social_impact', models.PositiveSmallIntegerField(default=20)),
                ('total', models.DecimalField(decimal_places=2, max_digits=5)),
                ('remarks', models.TextField(blank=True)),
                ('locked', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('evaluator', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='score_records', to=settings.AUTH_USER_MODEL)),
                ('event', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='score_records', to='events.event')),
                ('team', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='score_records', to='registration.team')),
            ],
            options={
                'ordering': ('event', 'kind', 'created_at', 'id'),
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('kind', 'screening')), fields=('event', 'team'), name='uniq_screening_score_per_team'),
                    models.UniqueConstraint(condition=models.Q(('kind', 'judging')), fields=('event', 'evaluator', 'team'), name='uniq_judging_score_per_judge'),
                ],
            },
        ),
    ]
