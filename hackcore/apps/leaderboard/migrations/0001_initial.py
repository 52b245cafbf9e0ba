from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('events', '0001_initial'),
        ('registration', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='ShortlistEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('rank', models.PositiveIntegerField()),
                ('total', models.DecimalField(decimal_places=2, max_digits=5)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('event', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='shortlist', to='events.event')),
                ('team', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='shortlist_entries', to='registration.team')),
            ],
            options={
                'verbose_name_plural': 'shortlist entries',
                'ordering': ('event', 'rank'),
                'constraints': [
                    models.UniqueConstraint(fields=('event', 'team'), name='uniq_shortlist_team'),
                    models.UniqueConstraint(fields=('event', 'rank'), name='uniq_shortlist_rank'),
                ],
            },
        ),
    ]
