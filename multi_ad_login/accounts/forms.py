"""Authentication forms."""
from django import forms


class ADLoginForm(forms.Form):
    """Login form accepting an account name or a UPN."""
    username = forms.CharField(
        max_length=254,
        widget=forms.TextInput(attrs={
            'class': 'form-control',
            'placeholder': 'Username or user@domain',
            'autofocus': True,
        }),
    )
    password = forms.CharField(
        strip=False,
        widget=forms.PasswordInput(attrs={
            'class': 'form-control',
            'placeholder': 'Password',
        }),
    )
