from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    dependencies = [
        ('racha', '0001_initial'),
    ]

    operations = [
        migrations.AlterField(
            model_name='expense',
            name='payer',
            field=models.ForeignKey(on_delete=django.db.models.deletion.RESTRICT, related_name='expenses_paid', to='racha.participant'),
        ),
        migrations.AlterField(
            model_name='expenseshare',
            name='participant',
            field=models.ForeignKey(on_delete=django.db.models.deletion.RESTRICT, related_name='shares', to='racha.participant'),
        ),
        migrations.AlterField(
            model_name='payment',
            name='participant',
            field=models.ForeignKey(on_delete=django.db.models.deletion.RESTRICT, related_name='payments', to='racha.participant'),
        ),
    ]
