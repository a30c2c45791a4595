from rest_framework import status

from common.exceptions import ClubError


class MemberNotFound(ClubError):
    code = "member_not_found"
    default_message = "User not found"
    status_code = status.HTTP_404_NOT_FOUND
