from django import forms

from .models import UserRole


class LoginForm(forms.Form):
    email = forms.EmailField(required=False)
    password = forms.CharField(widget=forms.PasswordInput, required=False, strip=False)

    def clean(self):
        cleaned_data = super().clean()
        if not cleaned_data.get("email") or not cleaned_data.get("password"):
            raise forms.ValidationError("Please fill in all fields")
        return cleaned_data


class SignupForm(forms.Form):
    first_name = forms.CharField(max_length=150)
    last_name = forms.CharField(max_length=150)
    email = forms.EmailField()
    password = forms.CharField(widget=forms.PasswordInput, strip=False)
    role = forms.ChoiceField(
        choices=[("", "Select a role")] + list(UserRole.choices),
        required=False,
    )
    school = forms.ChoiceField(choices=())

    def __init__(self, *args, schools=(), **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["school"].choices = [("", "Select a school")] + [
            (school.id, school.name) for school in schools
        ]

    def clean_role(self):
        role = self.cleaned_data.get("role")
        if not role:
            raise forms.ValidationError("Role is required")
        return role

    def payload(self):
        data = self.cleaned_data
        return {
            "firstName": data["first_name"],
            "lastName": data["last_name"],
            "email": data["email"],
            "password": data["password"],
            "role": data["role"],
            "schoolId": data["school"],
        }
