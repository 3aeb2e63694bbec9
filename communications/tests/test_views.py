# communications/tests/test_views.py
from datetime import date, timedelta

from django.test import TestCase
from django.utils import timezone

from communications.models import Activity, Announcement, LiaisonMessage
from shared.constants import Role
from shared.testing import (
    link_parent,
    make_child,
    make_classroom,
    make_school,
    make_user,
)


class LiaisonViewsTest(TestCase):
    def setUp(self):
        self.school = make_school('ALPHA')
        self.admin = make_user('admin@alpha.test', self.school, [Role.ADMIN])
        self.lead = make_user('lead@alpha.test', self.school, [Role.TEACHER])
        self.parent = make_user('parent@alpha.test', self.school, [Role.PARENT])
        self.classroom = make_classroom(self.school, 'CP1', lead_teacher=self.lead)
        self.child = make_child(self.school, 'Ada', classroom=self.classroom)
        link_parent(self.parent, self.child)
        self.url = f"/tenants/{self.school.pk}/liaison/"

    def write(self, **extra):
        self.client.force_login(self.lead)
        response = self.client.post(self.url, {
            'child_id': self.child.pk, 'title': 'Swimming', 'message': 'Bring a towel on Friday.', **extra,
        }, content_type='application/json')
        self.assertEqual(response.status_code, 201)
        return response.json()

    def test_lead_teacher_writes_with_default_kind(self):
        body = self.write()
        self.assertEqual(body['kind'], 'info')
        self.assertFalse(body['read_by_parent'])
        self.assertEqual(LiaisonMessage.objects.get(pk=body['id']).created_by_id, self.lead.pk)

    def test_parent_cannot_write(self):
        self.client.force_login(self.parent)
        response = self.client.post(self.url, {
            'child_id': self.child.pk, 'title': 'Hello', 'message': 'Hi',
        }, content_type='application/json')
        self.assertEqual(response.status_code, 404)

    def test_parent_marks_read_once(self):
        message_id = self.write()['id']
        self.client.force_login(self.parent)
        first = self.client.post(f"{self.url}{message_id}/mark-read/").json()
        self.assertTrue(first['read_by_parent'])
        second = self.client.post(f"{self.url}{message_id}/mark-read/").json()
        self.assertEqual(second['read_at'], first['read_at'])

    def test_teacher_cannot_mark_read(self):
        message_id = self.write()['id']
        self.assertEqual(self.client.post(f"{self.url}{message_id}/mark-read/").status_code, 404)

    def test_reply_requires_reply_flag(self):
        message_id = self.write()['id']
        self.client.force_login(self.parent)
        response = self.client.post(
            f"{self.url}{message_id}/reply/", {'reply': 'Noted'}, content_type='application/json'
        )
        self.assertEqual(response.status_code, 400)

    def test_parent_reply_marks_message_read(self):
        message_id = self.write(reply_required=True)['id']
        self.client.force_login(self.parent)
        response = self.client.post(
            f"{self.url}{message_id}/reply/", {'reply': 'Noted, thanks'}, content_type='application/json'
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body['parent_reply'], 'Noted, thanks')
        self.assertTrue(body['read_by_parent'])
        self.assertIsNotNone(body['replied_at'])

    def test_unread_filter(self):
        read_id = self.write()['id']
        self.write(title='Second')
        self.client.force_login(self.parent)
        self.client.post(f"{self.url}{read_id}/mark-read/")
        results = self.client.get(self.url, {'unread': 'true'}).json()['results']
        self.assertEqual([m['title'] for m in results], ['Second'])

    def test_statistics_count_reads_and_replies(self):
        self.write()
        answered_id = self.write(title='Trip form', reply_required=True)['id']
        self.client.force_login(self.parent)
        self.client.post(f"{self.url}{answered_id}/reply/", {'reply': 'Signed'}, content_type='application/json')

        body = self.client.get(f"{self.url}statistics/").json()
        self.assertEqual(body['total'], 2)
        self.assertEqual(body['read'], 1)
        self.assertEqual(body['unread'], 1)
        self.assertEqual(body['reply_required'], 1)
        self.assertEqual(body['replied'], 1)
        self.assertEqual(body['awaiting_reply'], 0)
        self.assertEqual(body['kind_distribution']['info'], {'total': 2, 'read': 1, 'replied': 1})
        self.assertEqual(body['kind_distribution']['health'], {'total': 0, 'read': 0, 'replied': 0})

        other = make_user('other@alpha.test', self.school, [Role.PARENT])
        self.client.force_login(other)
        self.assertEqual(self.client.get(f"{self.url}statistics/").json()['total'], 0)

    def test_unrelated_parent_sees_nothing(self):
        message_id = self.write()['id']
        other = make_user('other@alpha.test', self.school, [Role.PARENT])
        self.client.force_login(other)
        self.assertEqual(self.client.get(f"{self.url}{message_id}/").status_code, 404)
        self.assertEqual(self.client.post(f"{self.url}{message_id}/mark-read/").status_code, 404)


class AnnouncementViewsTest(TestCase):
    def setUp(self):
        self.school = make_school('ALPHA')
        self.admin = make_user('admin@alpha.test', self.school, [Role.ADMIN])
        self.teacher = make_user('teacher@alpha.test', self.school, [Role.TEACHER])
        self.parent = make_user('parent@alpha.test', self.school, [Role.PARENT])
        self.cp1 = make_classroom(self.school, 'CP1')
        make_classroom(self.school, 'CE1')
        link_parent(self.parent, make_child(self.school, 'Ada', classroom=self.cp1))
        self.url = f"/tenants/{self.school.pk}/announcements/"

    def publish(self, title, target_class=''):
        self.client.force_login(self.admin)
        response = self.client.post(self.url, {
            'title': title, 'content': 'Details inside.', 'target_class': target_class,
        }, content_type='application/json')
        self.assertEqual(response.status_code, 201)
        return response.json()

    def test_parent_sees_school_wide_and_own_class(self):
        self.publish('Everyone')
        self.publish('For CP1', 'CP1')
        self.publish('For CE1', 'CE1')

        self.client.force_login(self.parent)
        titles = {a['title'] for a in self.client.get(self.url).json()['results']}
        self.assertEqual(titles, {'Everyone', 'For CP1'})

        self.client.force_login(self.teacher)
        self.assertEqual(self.client.get(self.url).json()['pagination']['total'], 3)

    def test_parent_cannot_open_other_class_announcement(self):
        other = self.publish('For CE1', 'CE1')
        self.client.force_login(self.parent)
        self.assertEqual(self.client.get(f"{self.url}{other['id']}/").status_code, 404)

    def test_unknown_target_class_is_rejected(self):
        self.client.force_login(self.admin)
        response = self.client.post(self.url, {
            'title': 'Ghost', 'content': '...', 'target_class': 'ZZ9',
        }, content_type='application/json')
        self.assertEqual(response.status_code, 400)
        self.assertIn('target_class', response.json()['details'])

    def test_teacher_cannot_publish_or_delete(self):
        item = self.publish('Everyone')
        self.client.force_login(self.teacher)
        response = self.client.post(self.url, {'title': 'Mine', 'content': '...'}, content_type='application/json')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(self.client.delete(f"{self.url}{item['id']}/").status_code, 404)

    def test_statistics_split_general_and_targeted(self):
        self.publish('Everyone')
        self.client.post(self.url, {
            'title': 'Canteen menu', 'content': 'Fish on Friday.', 'kind': 'canteen',
            'target_class': 'CP1', 'send_notification': True,
        }, content_type='application/json')

        body = self.client.get(f"{self.url}statistics/").json()
        self.assertEqual(body['total'], 2)
        self.assertEqual(body['general'], 1)
        self.assertEqual(body['targeted'], 1)
        self.assertEqual(body['with_notification'], 1)
        self.assertEqual(body['kind_distribution']['general'], 1)
        self.assertEqual(body['kind_distribution']['canteen'], 1)
        today = timezone.localdate()
        self.assertEqual(body['by_month'], [{'year': today.year, 'month': today.month, 'count': 2}])

        self.client.force_login(self.teacher)
        self.assertEqual(self.client.get(f"{self.url}statistics/").status_code, 404)

    def test_delete_hides_announcement(self):
        item = self.publish('Everyone')
        self.assertEqual(self.client.delete(f"{self.url}{item['id']}/").status_code, 204)
        self.assertEqual(self.client.get(self.url).json()['results'], [])
        self.assertTrue(Announcement.all_objects.get(pk=item['id']).is_deleted)


class ActivityViewsTest(TestCase):
    def setUp(self):
        self.school = make_school('ALPHA')
        self.admin = make_user('admin@alpha.test', self.school, [Role.ADMIN])
        self.url = f"/tenants/{self.school.pk}/activities/"
        self.client.force_login(self.admin)

    def test_end_before_start_is_rejected(self):
        response = self.client.post(self.url, {
            'name': 'Museum trip', 'start_date': '2026-05-10', 'end_date': '2026-05-09',
        }, content_type='application/json')
        self.assertEqual(response.status_code, 400)
        self.assertIn('end_date', response.json()['details'])

    def test_create_and_search(self):
        response = self.client.post(self.url, {
            'name': 'Museum trip', 'start_date': '2026-05-10', 'location': 'Louvre',
        }, content_type='application/json')
        self.assertEqual(response.status_code, 201)
        self.assertEqual(self.client.get(self.url, {'search': 'louvre'}).json()['pagination']['total'], 1)
        self.assertEqual(self.client.get(self.url, {'search': 'zoo'}).json()['pagination']['total'], 0)


class ActivityAgendaViewsTest(TestCase):
    def setUp(self):
        self.school = make_school('ALPHA')
        self.admin = make_user('admin@alpha.test', self.school, [Role.ADMIN])
        self.teacher = make_user('teacher@alpha.test', self.school, [Role.TEACHER])
        self.parent = make_user('parent@alpha.test', self.school, [Role.PARENT])
        link_parent(self.parent, make_child(self.school, 'Ada', classroom=make_classroom(self.school, 'CP1')))
        make_classroom(self.school, 'CE1')
        self.url = f"/tenants/{self.school.pk}/activities/"
        self.today = timezone.localdate()

    def activity(self, name, start_date, target_class=''):
        return Activity.objects.create(school=self.school, name=name, start_date=start_date, target_class=target_class)

    def test_upcoming_skips_past_and_honours_limit(self):
        self.activity('Past', self.today - timedelta(days=3))
        self.activity('Soon', self.today + timedelta(days=1))
        self.activity('Later', self.today + timedelta(days=2))
        self.activity('Much later', self.today + timedelta(days=10))

        self.client.force_login(self.teacher)
        results = self.client.get(f"{self.url}upcoming/", {'limit': 2}).json()['results']
        self.assertEqual([a['name'] for a in results], ['Soon', 'Later'])
        self.assertEqual(len(self.client.get(f"{self.url}upcoming/").json()['results']), 3)

    def test_upcoming_limit_is_validated(self):
        self.client.force_login(self.teacher)
        response = self.client.get(f"{self.url}upcoming/", {'limit': 0})
        self.assertEqual(response.status_code, 400)
        self.assertIn('limit', response.json()['details'])

    def test_parent_upcoming_hides_other_class_activities(self):
        self.activity('Open day', self.today + timedelta(days=1))
        self.activity('CP1 outing', self.today + timedelta(days=2), 'CP1')
        self.activity('CE1 outing', self.today + timedelta(days=3), 'CE1')

        self.client.force_login(self.parent)
        results = self.client.get(f"{self.url}upcoming/").json()['results']
        self.assertEqual([a['name'] for a in results], ['Open day', 'CP1 outing'])

    def test_calendar_lists_one_month(self):
        self.activity('Museum', date(2026, 5, 20))
        self.activity('Sports day', date(2026, 5, 10), 'CP1')
        self.activity('June fair', date(2026, 6, 1))

        self.client.force_login(self.teacher)
        body = self.client.get(f"{self.url}calendar/", {'year': 2026, 'month': 5}).json()
        self.assertEqual((body['year'], body['month']), (2026, 5))
        self.assertEqual([a['name'] for a in body['results']], ['Sports day', 'Museum'])

        body = self.client.get(f"{self.url}calendar/", {'year': 2026, 'month': 5, 'target_class': 'CE1'}).json()
        self.assertEqual([a['name'] for a in body['results']], ['Museum'])

    def test_calendar_defaults_to_current_month(self):
        self.activity('Today', self.today)
        self.client.force_login(self.teacher)
        body = self.client.get(f"{self.url}calendar/").json()
        self.assertEqual((body['year'], body['month']), (self.today.year, self.today.month))
        self.assertEqual([a['name'] for a in body['results']], ['Today'])

    def test_calendar_rejects_invalid_month(self):
        self.client.force_login(self.teacher)
        self.assertEqual(self.client.get(f"{self.url}calendar/", {'month': 13}).status_code, 400)

    def test_statistics_count_upcoming_and_targeted(self):
        self.activity('Past', self.today - timedelta(days=3))
        self.activity('Soon', self.today + timedelta(days=1), 'CP1')
        self.activity('Later', self.today + timedelta(days=2))
        Activity.objects.create(school=make_school('BETA'), name='Elsewhere', start_date=self.today)

        self.client.force_login(self.admin)
        body = self.client.get(f"{self.url}statistics/").json()
        self.assertEqual(body['total'], 3)
        self.assertEqual(body['general'], 2)
        self.assertEqual(body['targeted'], 1)
        self.assertEqual(body['upcoming'], 2)
        self.assertEqual(sum(month['count'] for month in body['by_month']), 3)

        self.client.force_login(self.teacher)
        self.assertEqual(self.client.get(f"{self.url}statistics/").status_code, 404)
