from tortoise import fields
from ...common.models import TimestampMixin


class Expense(TimestampMixin):
    id = fields.IntField(primary_key=True)
    date = fields.DateField(db_index=True)
    amount = fields.FloatField()
    description = fields.CharField(max_length=255, null=True)

    def __str__(self):
        return f"Expense of {self.amount:.2f} on {self.date}"

    class Meta:
        table = "expenses"
