import json
import unittest

from normalize.models import ActivityDay, AssociatedPullRequest, Comment, Commit, DayBucket, Issue, NoteDay, Review
from report.renderer import day_context, note_line_items, render


def _activity_day():
    bucket = DayBucket('2021-06-01')
    bucket.issues.append(Issue(1, 10, 'https://github.com/acme/app/pull/10', '', '', 'Add <export>', '2021-06-01T18:00:00Z', True, 'alice'))
    bucket.reviews.append(Review(501, 'https://github.com/acme/app/pull/20#pullrequestreview-501', '2021-06-01T20:00:00Z', 'https://github.com/acme/app/pull/20', 20, 'Fix login'))
    bucket.comments.append(Comment(701, 'https://github.com/acme/app/issues/30#issuecomment-701', '2021-06-01T06:00:00Z', 'alice'))
    prs = [
        AssociatedPullRequest(10, 'https://github.com/acme/app/pull/10', 'Add export', 'alice'),
        AssociatedPullRequest(12, 'https://github.com/acme/app/pull/12', 'Tidy up', 'alice'),
    ]
    bucket.commits.append(Commit('abc1234def', 'https://github.com/acme/app/commit/abc1234def', '2021-06-01T10:00:00-07:00', 'app', 'acme', prs))
    return ActivityDay(bucket)


class TestRenderHtml(unittest.TestCase):
    def test_activity_and_note_days(self):
        report = {
            '2021-06-01': _activity_day(),
            '2021-06-02': NoteDay('2021-06-02', '• Wrote docs\n\n• Planning'),
        }
        html = render(report, fmt='html', username='alice', scope='2021-06-01 to 2021-06-02')

        self.assertIn('JUN 1ST 2021', html)
        self.assertIn('https://github.com/alice?tab=overview&amp;from=2021-06-01&amp;to=2021-06-01', html)
        self.assertIn('Created <a href="https://github.com/acme/app/pull/10">PR #10</a>', html)
        self.assertIn('Reviewed <a href="https://github.com/acme/app/pull/20#pullrequestreview-501">PR #20</a>', html)
        self.assertIn('acme/app/issues/30#issuecomment-701', html)
        # PR 10 was created that day so only PR 12 counts as updated
        self.assertIn('Updated <a href="https://github.com/acme/app/pull/12">PR #12</a>', html)
        self.assertNotIn('Updated <a href="https://github.com/acme/app/pull/10">', html)
        self.assertIn('abc1234', html)

        self.assertIn('Jun 2nd 2021 Wednesday', html)
        self.assertIn('<li>Wrote docs</li>', html)
        self.assertIn('<li>Planning</li>', html)

    def test_note_only_report(self):
        report = {'2021-06-02': NoteDay('2021-06-02', '• first\n• second')}
        html = render(report, fmt='html', username='alice')
        self.assertIn('<li>first</li>', html)
        self.assertIn('<li>second</li>', html)
        self.assertEqual(day_context(report['2021-06-02'], 'alice')['lines'], ['first', 'second'])

    def test_same_pr_number_in_different_repositories_stays_separate(self):
        bucket = DayBucket('2021-06-01')
        bucket.issues.append(Issue(1, 7, 'https://github.com/acme/app/pull/7', '', '', 'New', '2021-06-01T18:00:00Z', True, 'alice'))
        for repo, sha in (('app', 'aaa1111'), ('lib', 'bbb2222'), ('cli', 'ccc3333')):
            pr = AssociatedPullRequest(7, f'https://github.com/acme/{repo}/pull/7', f'{repo} change', 'alice')
            bucket.commits.append(Commit(sha, f'https://github.com/acme/{repo}/commit/{sha}', '2021-06-01T10:00:00-07:00', repo, 'acme', [pr]))

        updated = day_context(ActivityDay(bucket), 'alice')['updated_prs']

        # acme/app#7 was created that day; the other two are updates
        self.assertEqual([pr['url'] for pr in updated], ['https://github.com/acme/lib/pull/7', 'https://github.com/acme/cli/pull/7'])
        self.assertEqual([[c['short_sha'] for c in pr['commits']] for pr in updated], [['bbb2222'], ['ccc3333']])

    def test_titles_are_escaped(self):
        html = render({'2021-06-01': _activity_day()}, fmt='html', username='alice')
        self.assertIn('Add &lt;export&gt;', html)
        self.assertNotIn('Add <export>', html)

    def test_empty_days_are_skipped(self):
        report = {'2021-06-01': ActivityDay(DayBucket('2021-06-01')), '2021-06-02': NoteDay('2021-06-02', '')}
        html = render(report, fmt='html', username='alice')
        self.assertIn('No activity found.', html)
        self.assertNotIn('JUN 1ST 2021', html)


class TestRenderJson(unittest.TestCase):
    def test_every_day_is_exported_in_order(self):
        report = {'2021-06-01': _activity_day(), '2021-06-02': NoteDay('2021-06-02', '')}
        data = json.loads(render(report, fmt='json'))
        self.assertEqual([d['date'] for d in data], ['2021-06-01', '2021-06-02'])
        self.assertEqual(data[0]['kind'], 'activity')
        self.assertEqual(data[0]['issues'][0]['number'], 10)
        self.assertEqual(data[1], {'kind': 'note', 'date': '2021-06-02', 'text': ''})


class TestRenderErrors(unittest.TestCase):
    def test_unknown_day_type_is_rejected(self):
        with self.assertRaises(TypeError):
            day_context(object(), 'alice')

    def test_unknown_format_is_rejected(self):
        with self.assertRaises(ValueError):
            render({}, fmt='pdf')


def test_note_line_items_strip_bullets_and_blank_lines():
    assert note_line_items('• one\n\n  • two  \nthree') == ['one', 'two', 'three']
