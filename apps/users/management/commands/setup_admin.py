from django.core.management.base import BaseCommand
from django.db import transaction
from django.db.models import Q

from apps.users.models import Agency, Member, MembershipType, Role, Status

TEST_AGENCY = {
    "member_number": "AG00000001",
    "name": "Test Agency",
    "email": "test@agency.com",
    "membership_type": MembershipType.A1_AGENCY,
    "status": Status.ACTIVE,
}


class Command(BaseCommand):
    help = "Creates or updates the Super Admin account and the test agency"

    def add_arguments(self, parser):
        parser.add_argument("--email", default="admin@memberhub.com")
        parser.add_argument("--name", default="Super Admin")

    @transaction.atomic
    def handle(self, *args, **options):
        email = options["email"]
        first_name, _, last_name = options["name"].partition(" ")

        admin = Member.objects.filter(email__iexact=email).first()
        if admin is None:
            admin = Member.objects.create_user(email=email)
            self.stdout.write(f"Created member {email}")

        admin.first_name = first_name
        admin.last_name = last_name
        admin.role = Role.SUPER_ADMIN
        admin.status = Status.ACTIVE
        admin.is_staff = True
        admin.is_superuser = True
        admin.save()
        self.stdout.write(self.style.SUCCESS(f"{email} is a Super Admin"))

        agency = Agency.objects.filter(
            Q(member_number=TEST_AGENCY["member_number"]) | Q(email__iexact=TEST_AGENCY["email"])
        ).first()
        if agency is None:
            agency = Agency(**TEST_AGENCY)
        else:
            for field, value in TEST_AGENCY.items():
                setattr(agency, field, value)
        agency.save()
        self.stdout.write(self.style.SUCCESS(f"Test agency {agency.member_number} ready"))
