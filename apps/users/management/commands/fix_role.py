from django.core.management.base import BaseCommand, CommandError

from apps.users import services
from apps.users.models import Agency, Member, Role


class Command(BaseCommand):
    help = "Sets a member's role (and agency) and pushes it to the identity provider"

    def add_arguments(self, parser):
        parser.add_argument("email")
        parser.add_argument("role", choices=Role.values)
        parser.add_argument("--agency", help="Agency member number, e.g. AG00000001")

    def handle(self, *args, **options):
        try:
            member = Member.objects.get_by_email(options["email"])
        except Member.DoesNotExist:
            raise CommandError(f"No member with email {options['email']}")

        agency = member.agency
        if options["agency"]:
            agency = Agency.objects.filter(member_number=options["agency"]).first()
            if agency is None:
                raise CommandError(f"No agency with member number {options['agency']}")

        services.assign_role(member, options["role"], agency, reason="fix_role command")
        self.stdout.write(
            self.style.SUCCESS(
                f"{member.email}: role {member.role}, agency {agency.member_number if agency else 'none'}"
            )
        )
