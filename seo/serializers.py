"""
Serializers for retirement engine requests.
Validate the JSON batch and convert it into engine value types.
"""
from django.utils import timezone
from rest_framework import serializers

from .retirement.constants import ACTION_TYPES
from .retirement.datatypes import ContentDocument, ContentMetrics, PlannedAction, ScoreWeights
from .retirement.extract import document_from_html
from .retirement.pipeline import AnalysisItem


def months_since(moment, now=None) -> int:
    """Whole calendar months between `moment` and now (never negative)."""
    now = now or timezone.now()
    months = (now.year - moment.year) * 12 + (now.month - moment.month)
    if now.day < moment.day:
        months -= 1
    return max(0, months)


class ContentMetricsSerializer(serializers.Serializer):
    """
    Metrics snapshot for one URL.

    `ctr` defaults to clicks / impressions and `age_months` to the months
    elapsed since `last_updated` when they are not supplied.
    """
    clicks = serializers.FloatField(min_value=0, default=0)
    impressions = serializers.FloatField(min_value=0, default=0)
    position = serializers.FloatField(min_value=0, default=0)
    ctr = serializers.FloatField(min_value=0, required=False, allow_null=True)
    conversions = serializers.FloatField(min_value=0, default=0)
    backlinks = serializers.FloatField(min_value=0, default=0)
    age_months = serializers.FloatField(min_value=0, required=False, allow_null=True)
    sessions = serializers.FloatField(min_value=0, required=False, allow_null=True)
    bounce_rate = serializers.FloatField(min_value=0, max_value=1, required=False, allow_null=True)
    avg_time_on_page = serializers.FloatField(min_value=0, required=False, allow_null=True)
    last_updated = serializers.DateTimeField(required=False, allow_null=True)

    def validate(self, attrs):
        if attrs.get('ctr') is None:
            impressions = attrs.get('impressions', 0)
            attrs['ctr'] = attrs.get('clicks', 0) / impressions if impressions else 0.0

        if attrs.get('age_months') is None:
            last_updated = attrs.get('last_updated')
            attrs['age_months'] = months_since(last_updated) if last_updated else 0

        return attrs


class ContentDocumentSerializer(serializers.Serializer):
    # Plain strings: malformed URLs are scored neutrally, not rejected
    url = serializers.CharField(required=False, allow_blank=True, default='')
    title = serializers.CharField(required=False, allow_blank=True, default='')
    body = serializers.CharField(required=False, allow_blank=True, default='', trim_whitespace=False)
    meta_description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    headings = serializers.ListField(
        child=serializers.CharField(allow_blank=True),
        required=False,
        default=list,
    )
    # Rendered post HTML; fills in whichever of the fields above are empty
    html = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)


class ScoreWeightsSerializer(serializers.Serializer):
    traffic = serializers.FloatField(min_value=0, required=False)
    rank = serializers.FloatField(min_value=0, required=False)
    engagement = serializers.FloatField(min_value=0, required=False)
    freshness = serializers.FloatField(min_value=0, required=False)
    cannibal = serializers.FloatField(min_value=0, required=False)
    no_value = serializers.FloatField(min_value=0, required=False)


class AnalysisItemSerializer(serializers.Serializer):
    url = serializers.CharField()
    metrics = ContentMetricsSerializer()
    content = ContentDocumentSerializer(required=False, allow_null=True)


class AnalyzeRequestSerializer(serializers.Serializer):
    items = AnalysisItemSerializer(many=True, allow_empty=True)
    weights = ScoreWeightsSerializer(required=False, allow_null=True)
    include_report = serializers.BooleanField(default=True)


class PlannedActionSerializer(serializers.Serializer):
    url = serializers.CharField()
    action = serializers.ChoiceField(choices=ACTION_TYPES)
    risk = serializers.FloatField(min_value=0, max_value=100)
    metrics = ContentMetricsSerializer()
    rationale = serializers.CharField(required=False, allow_blank=True, default='')


class SimulateRequestSerializer(serializers.Serializer):
    actions = PlannedActionSerializer(many=True, allow_empty=True)


class ClusterRequestSerializer(serializers.Serializer):
    documents = ContentDocumentSerializer(many=True, allow_empty=True)

    def validate_documents(self, value):
        missing = [i for i, doc in enumerate(value) if not doc.get('url')]
        if missing:
            raise serializers.ValidationError(f"Documents at positions {missing} have no url")
        return value


# =============================================================================
# CONVERSION
# =============================================================================

def build_metrics(data) -> ContentMetrics:
    return ContentMetrics.from_dict(data)


def build_document(data, fallback_url: str = '') -> ContentDocument:
    if data.get('html'):
        return document_from_html(
            url=data.get('url') or fallback_url,
            html=data['html'],
            title=data.get('title'),
            meta_description=data.get('meta_description'),
            headings=data.get('headings'),
        )

    return ContentDocument(
        url=data.get('url') or fallback_url,
        title=data.get('title') or '',
        body=data.get('body') or '',
        meta_description=data.get('meta_description'),
        headings=tuple(data.get('headings') or ()),
    )


def build_items(validated_items) -> list:
    items = []
    for item in validated_items:
        content = item.get('content')
        items.append(AnalysisItem(
            url=item['url'],
            metrics=build_metrics(item['metrics']),
            content=build_document(content, fallback_url=item['url']) if content is not None else None,
        ))
    return items


def build_weights(validated_weights, defaults=None) -> ScoreWeights:
    """Request weights override configured defaults, which override built-in weights."""
    merged = dict(defaults or {})
    merged.update(validated_weights or {})
    return ScoreWeights.from_dict(merged)


def build_planned_actions(validated_actions) -> list:
    return [
        PlannedAction(
            url=a['url'],
            action=a['action'],
            risk=a['risk'],
            metrics=build_metrics(a['metrics']),
            rationale=a.get('rationale', ''),
        )
        for a in validated_actions
    ]
