"""Identity constants: the two roles of the organisation."""

from django.db import models


class Role(models.TextChoices):
    ADMIN = "admin", "Administrateur"
    EMPLOYEE = "employee", "Employé"
