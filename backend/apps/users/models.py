from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    # Login identifier is the e-mail address; username stays unique for the admin.
    email = models.EmailField(unique=True)

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["username"]

    def __str__(self):
        return self.email
