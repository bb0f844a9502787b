import unittest

from correlate.bucketing import bucket_by_day, day_keys_for_range
from dates.days import adjust_for_remote_day_boundary
from normalize.models import Issue, Review, Comment, Commit

TZ = 'America/Los_Angeles'


def _issue(number, created_at):
    return Issue(number, number, f'https://github.com/acme/app/issues/{number}', '', '', f'Item {number}', created_at, False, 'alice')


class TestBucketByDay(unittest.TestCase):
    def setUp(self):
        self.date_range = adjust_for_remote_day_boundary(TZ, '2021-06-01', '2021-06-03')

    def test_every_day_of_the_range_gets_a_bucket(self):
        buckets = bucket_by_day(self.date_range, TZ, [], [], [], [])
        self.assertEqual(list(buckets), ['2021-06-01', '2021-06-02', '2021-06-03'])
        self.assertTrue(all(b.is_empty() for b in buckets.values()))

    def test_single_day_range(self):
        date_range = adjust_for_remote_day_boundary(TZ, '2021-06-01', '2021-06-01')
        self.assertEqual(day_keys_for_range(date_range), ['2021-06-01'])

    def test_entities_land_on_their_local_day(self):
        issues = [_issue(1, '2021-06-02T03:00:00Z'), _issue(2, '2021-06-02T18:00:00Z')]
        reviews = [Review(5, 'https://github.com/acme/app/pull/9#r5', '2021-06-03T12:00:00-07:00', '', 9, 'x')]
        comments = [Comment(7, 'https://github.com/acme/app/issues/3#c7', '2021-06-01T08:00:00Z', 'alice')]
        commits = [Commit('abc', 'https://github.com/acme/app/commit/abc', '2021-06-02T23:30:00-07:00', 'app', 'acme')]

        buckets = bucket_by_day(self.date_range, TZ, issues, reviews, comments, commits)

        self.assertEqual([i.number for i in buckets['2021-06-01'].issues], [1])
        self.assertEqual([c.comment_id for c in buckets['2021-06-01'].comments], [7])
        self.assertEqual([i.number for i in buckets['2021-06-02'].issues], [2])
        self.assertEqual([c.sha for c in buckets['2021-06-02'].commits], ['abc'])
        self.assertEqual([r.review_id for r in buckets['2021-06-03'].reviews], [5])

    def test_each_entity_is_placed_at_most_once_and_out_of_range_is_dropped(self):
        issues = [_issue(1, '2021-05-31T12:00:00-07:00'), _issue(2, '2021-06-02T12:00:00-07:00'), _issue(3, '2021-06-04T12:00:00-07:00')]
        buckets = bucket_by_day(self.date_range, TZ, issues, [], [], [])
        placed = [i.number for b in buckets.values() for i in b.issues]
        self.assertEqual(placed, [2])

    def test_undated_entities_are_dropped(self):
        reviews = [
            Review(5, 'https://github.com/acme/app/pull/9#r5', '', '', 9, 'pending'),
            Review(6, 'https://github.com/acme/app/pull/9#r6', None, '', 9, 'pending'),
            Review(7, 'https://github.com/acme/app/pull/9#r7', '2021-06-02T12:00:00-07:00', '', 9, 'done'),
        ]
        buckets = bucket_by_day(self.date_range, TZ, [], reviews, [], [])
        placed = [r.review_id for b in buckets.values() for r in b.reviews]
        self.assertEqual(placed, [7])

    def test_input_order_is_preserved_within_a_day(self):
        issues = [_issue(3, '2021-06-02T15:00:00-07:00'), _issue(1, '2021-06-02T09:00:00-07:00'), _issue(2, '2021-06-02T12:00:00-07:00')]
        buckets = bucket_by_day(self.date_range, TZ, issues, [], [], [])
        self.assertEqual([i.number for i in buckets['2021-06-02'].issues], [3, 1, 2])

    def test_bucketing_is_repeatable(self):
        issues = [_issue(1, '2021-06-02T03:00:00Z')]
        first = bucket_by_day(self.date_range, TZ, issues, [], [], [])
        second = bucket_by_day(self.date_range, TZ, issues, [], [], [])
        self.assertEqual({k: b.to_dict() for k, b in first.items()}, {k: b.to_dict() for k, b in second.items()})


if __name__ == '__main__':
    unittest.main()
