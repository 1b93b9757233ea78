from django import forms
from django.utils.translation import gettext_lazy as _

from authentication.models import Branch
from orders.models import Order
from orders.timeutils import DATE_RANGE_PRESETS


class ReportFilterForm(forms.Form):
    """Query string filters shared by history, reports and exports"""
    start_date = forms.DateField(required=False, input_formats=['%Y-%m-%d'])
    end_date = forms.DateField(required=False, input_formats=['%Y-%m-%d'])
    branch_id = forms.ModelChoiceField(queryset=Branch.objects.all(), required=False)
    payment_method = forms.ChoiceField(
        choices=Order.PAYMENT_METHOD_CHOICES, required=False
    )
    status = forms.ChoiceField(choices=Order.STATUS_CHOICES, required=False)

    def clean(self):
        cleaned_data = super().clean()
        start_date = cleaned_data.get('start_date')
        end_date = cleaned_data.get('end_date')

        if start_date and end_date and start_date > end_date:
            raise forms.ValidationError(_('The start date must not be after the end date.'))

        return cleaned_data


class MenuAnalysisForm(forms.Form):
    date_range = forms.ChoiceField(
        choices=[(preset, preset) for preset in DATE_RANGE_PRESETS],
        required=False,
    )
    branch_id = forms.ModelChoiceField(queryset=Branch.objects.all(), required=False)

    def clean_date_range(self):
        return self.cleaned_data.get('date_range') or 'this_month'
