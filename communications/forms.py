# communications/forms.py
from django import forms

from shared.constants import AnnouncementKind, LiaisonKind
from shared.forms import ApiForm


class LiaisonMessageForm(ApiForm):
    child_id = forms.IntegerField()
    title = forms.CharField(max_length=200)
    message = forms.CharField()
    kind = forms.ChoiceField(choices=LiaisonKind.choices, required=False)
    reply_required = forms.BooleanField(required=False)


class LiaisonReplyForm(ApiForm):
    reply = forms.CharField(max_length=5000)


class AnnouncementForm(ApiForm):
    title = forms.CharField(max_length=200)
    content = forms.CharField()
    kind = forms.ChoiceField(choices=AnnouncementKind.choices, required=False)
    published_at = forms.DateTimeField(required=False)
    target_class = forms.CharField(max_length=100, required=False)
    send_notification = forms.BooleanField(required=False)


class ActivityForm(ApiForm):
    name = forms.CharField(max_length=200)
    description = forms.CharField(required=False)
    start_date = forms.DateField()
    end_date = forms.DateField(required=False)
    start_time = forms.TimeField(required=False)
    end_time = forms.TimeField(required=False)
    location = forms.CharField(max_length=200, required=False)
    target_class = forms.CharField(max_length=100, required=False)


class UpcomingActivitiesForm(ApiForm):
    limit = forms.IntegerField(required=False, min_value=1, max_value=50)


class ActivityCalendarForm(ApiForm):
    year = forms.IntegerField(required=False, min_value=2000, max_value=2100)
    month = forms.IntegerField(required=False, min_value=1, max_value=12)
    target_class = forms.CharField(max_length=100, required=False)
